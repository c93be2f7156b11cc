"""
Unit tests for entity extraction, normalization and overlap resolution.

Reference time: Monday 2026-10-19, 10:00 Africa/Algiers.
"""
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from nova.calendar.business_hours import default_business_hours
from nova.data_types import EntityMatch, EntityType
from nova.extraction.normalization import normalize_text
from nova.extraction.overlap import resolve_overlaps

ALGIERS = ZoneInfo("Africa/Algiers")
MONDAY_10AM = datetime(2026, 10, 19, 10, 0, tzinfo=ALGIERS)
MONDAY_7PM = datetime(2026, 10, 19, 19, 0, tzinfo=ALGIERS)
HOURS = default_business_hours()


def _entity(etype, start, end, confidence=0.8, value="x"):
    return EntityMatch(type=etype, value=value, normalized=value, confidence=confidence, start=start, end=end)


@pytest.fixture
def normalizer(pipeline):
    return pipeline.entity_normalizer


@pytest.fixture
def extract(pipeline):
    def _extract(text):
        return pipeline.extractor.extract(normalize_text(text))
    return _extract


class TestEntityExtractor:
    """Tests for candidate extraction."""

    def test_finds_date_and_time_window(self, extract):
        found = {(e.type, e.value) for e in extract("je voudrais un rdv demain matin")}
        assert (EntityType.DATE, "demain") in found
        assert (EntityType.TIME, "matin") in found

    def test_offsets_refer_to_normalized_text(self, extract):
        normalized = normalize_text("Mon email : marie@test.com")
        emails = [e for e in extract("Mon email : marie@test.com") if e.type == EntityType.EMAIL]
        assert len(emails) == 1
        assert normalized[emails[0].start:emails[0].end] == "marie@test.com"

    def test_candidates_start_with_base_confidence(self, extract):
        assert all(e.confidence == 0.8 for e in extract("demain a 14h30 pour un detartrage"))

    def test_phone_formats(self, extract):
        for text in ("0555123456", "0555 12 34 56", "+213555123456", "00213555123456"):
            phones = [e for e in extract(f"mon numero {text}") if e.type == EntityType.PHONE]
            assert len(phones) == 1, text

    def test_no_entities_in_gibberish(self, extract):
        assert extract("xyz123###") == []

    def test_practitioner_stopwords_not_taken_as_names(self, extract):
        practitioners = [e for e in extract("un rendez-vous avec le docteur demain") if e.type == EntityType.PRACTITIONER]
        assert practitioners == []


class TestDateNormalization:
    """Tests for date canonicalization against the tenant clock."""

    @pytest.mark.parametrize("raw,expected", [
        ("demain", "2026-10-20"),
        ("aujourd hui", "2026-10-19"),
        ("apres-demain", "2026-10-21"),
        ("mercredi", "2026-10-21"),
        ("dimanche", "2026-10-25"),
        ("2026-11-03", "2026-11-03"),
        ("15/12/2026", "2026-12-15"),
        ("15.12.2026", "2026-12-15"),
        ("15/12", "2026-12-15"),
        ("01/10", "2027-10-01"),
        ("1er novembre", "2026-11-01"),
        ("25 decembre 2027", "2027-12-25"),
        ("dans 3 jours", "2026-10-22"),
        ("la semaine prochaine", "2026-10-26"),
        ("le mois prochain", "2026-11-01"),
    ])
    def test_canonical_dates(self, normalizer, raw, expected):
        assert normalizer.normalize_value(EntityType.DATE, raw, MONDAY_10AM, HOURS) == expected

    def test_same_weekday_is_today_while_open(self, normalizer):
        assert normalizer.normalize_value(EntityType.DATE, "lundi", MONDAY_10AM, HOURS) == "2026-10-19"

    def test_same_weekday_is_next_week_after_closing(self, normalizer):
        assert normalizer.normalize_value(EntityType.DATE, "lundi", MONDAY_7PM, HOURS) == "2026-10-26"

    @pytest.mark.parametrize("raw", ["31/02/2026", "2026-13-01", "octobre"])
    def test_unparsable_dates_keep_raw_text(self, normalizer, raw):
        assert normalizer.normalize_value(EntityType.DATE, raw, MONDAY_10AM, HOURS) == raw


class TestOtherNormalization:
    """Tests for time, service, contact, practitioner and urgency values."""

    @pytest.mark.parametrize("raw,expected", [
        ("14h30", "14:30"),
        ("14:30", "14:30"),
        ("vers 9h", "09:00"),
        ("15 heures", "15:00"),
        ("9h", "09:00"),
        ("midi", "12:00"),
        ("matin", "morning"),
        ("matinee", "morning"),
        ("apres-midi", "afternoon"),
        ("soiree", "evening"),
        ("fin de journee", "evening"),
    ])
    def test_times(self, normalizer, raw, expected):
        assert normalizer.normalize_value(EntityType.TIME, raw, MONDAY_10AM, HOURS) == expected

    def test_out_of_range_time_keeps_raw(self, normalizer):
        assert normalizer.normalize_value(EntityType.TIME, "25h", MONDAY_10AM, HOURS) == "25h"

    @pytest.mark.parametrize("raw,expected", [
        ("nettoyage", "détartrage"),
        ("caries", "plombage"),
        ("dents de sagesse", "extraction"),
        ("consultation", "consultation"),
        ("bagues", "orthodontie"),
    ])
    def test_services(self, normalizer, raw, expected):
        assert normalizer.normalize_value(EntityType.SERVICE_TYPE, raw, MONDAY_10AM, HOURS) == expected

    @pytest.mark.parametrize("raw", ["0555123456", "0555 12 34 56", "00213555123456", "+213555123456"])
    def test_phone_to_international(self, normalizer, raw):
        assert normalizer.normalize_value(EntityType.PHONE, raw, MONDAY_10AM, HOURS) == "+213555123456"

    def test_email_lowercased(self, normalizer):
        assert normalizer.normalize_value(EntityType.EMAIL, "Marie@Test.com", MONDAY_10AM, HOURS) == "marie@test.com"

    @pytest.mark.parametrize("raw,expected", [
        ("avec le docteur benali", "Benali"),
        ("dr haddad", "Haddad"),
        ("chez la docteur ben-ali", "Ben-Ali"),
    ])
    def test_practitioner_title_removed(self, normalizer, raw, expected):
        assert normalizer.normalize_value(EntityType.PRACTITIONER, raw, MONDAY_10AM, HOURS) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("urgent", "emergency"),
        ("rapidement", "urgent"),
        ("pas presse", "routine"),
    ])
    def test_urgency_levels(self, normalizer, raw, expected):
        assert normalizer.normalize_value(EntityType.URGENCY, raw, MONDAY_10AM, HOURS) == expected

    def test_normalize_returns_copy(self, normalizer):
        entity = _entity(EntityType.DATE, 0, 6, value="demain")
        result = normalizer.normalize(entity, MONDAY_10AM, HOURS)
        assert result.normalized == "2026-10-20"
        assert entity.normalized == "demain"
        assert result.value == "demain"


class TestResolveOverlaps:
    """Tests for resolve_overlaps."""

    def test_disjoint_entities_all_kept_in_order(self):
        a = _entity(EntityType.TIME, 10, 15)
        b = _entity(EntityType.DATE, 0, 6)
        assert resolve_overlaps([a, b]) == [b, a]

    def test_tie_keeps_earlier_accepted(self):
        longer = _entity(EntityType.TIME, 0, 10)
        inner = _entity(EntityType.DATE, 2, 6)
        assert resolve_overlaps([inner, longer]) == [longer]

    def test_higher_confidence_replaces(self):
        low = _entity(EntityType.TIME, 0, 10, confidence=0.6)
        high = _entity(EntityType.DATE, 5, 12, confidence=0.9)
        assert resolve_overlaps([low, high]) == [high]

    def test_lower_confidence_candidate_dropped(self):
        a = _entity(EntityType.DATE, 0, 5, confidence=0.9)
        b = _entity(EntityType.TIME, 6, 10, confidence=0.5)
        spanning = _entity(EntityType.EMAIL, 3, 8, confidence=0.7)
        assert resolve_overlaps([a, b, spanning]) == [a, b]

    def test_result_pairwise_disjoint(self):
        candidates = [
            _entity(EntityType.DATE, 0, 6),
            _entity(EntityType.TIME, 4, 9, confidence=0.85),
            _entity(EntityType.TIME, 8, 12),
            _entity(EntityType.EMAIL, 20, 30),
        ]
        result = resolve_overlaps(candidates)
        for i, first in enumerate(result):
            for second in result[i + 1:]:
                assert not first.overlaps(second)

    def test_empty(self):
        assert resolve_overlaps([]) == []
