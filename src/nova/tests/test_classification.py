"""
Unit tests for intent classification and the context adjuster.
"""
import logging

import pytest

from nova.classification.context import ContextAdjuster
from nova.classification.intent_classifier import IntentClassifier, IntentScore
from nova.data_types import EntityMatch, EntityType, Intent


def _entity(etype, value="x", start=0):
    return EntityMatch(type=etype, value=value, normalized=value, confidence=0.8, start=start, end=start + 1)


@pytest.fixture
def classifier(tables):
    return IntentClassifier(tables)


@pytest.fixture
def adjuster(tables):
    return ContextAdjuster(tables.vocabularies)


class TestIntentClassifier:
    """Tests for IntentClassifier."""

    def test_no_match_is_fallback_zero(self, classifier):
        assert classifier.classify("xyz123###", []) == IntentScore(Intent.FALLBACK, 0.0)

    def test_single_match_scores_base(self, classifier):
        assert classifier.classify("qui sont vos dentistes", []) == IntentScore(Intent.LIST_PRACTITIONERS, 0.6)

    @pytest.mark.parametrize("text", [
        "quels sont vos horaires",
        "vos horaires d ouverture",
        "quelle est votre adresse",
        "etes-vous ouverts le samedi",
    ])
    def test_clinic_info_questions(self, classifier, text):
        assert classifier.classify(text, []) == IntentScore(Intent.CLINIC_INFO, 0.6)

    def test_scheduling_boosts(self, classifier):
        entities = [_entity(EntityType.DATE), _entity(EntityType.TIME, start=2)]
        score = classifier.classify("je voudrais prendre rendez-vous demain matin", entities)
        assert score == IntentScore(Intent.BOOK_APPOINTMENT, 0.9)

    def test_boosts_capped(self, classifier):
        entities = [
            _entity(EntityType.DATE),
            _entity(EntityType.SERVICE_TYPE, start=2),
            _entity(EntityType.TIME, start=4),
        ]
        score = classifier.classify("je voudrais prendre rendez-vous", entities)
        assert score.confidence == 0.95

    def test_contact_boost_for_cancel(self, classifier):
        score = classifier.classify("annuler mon rendez-vous", [_entity(EntityType.EMAIL)])
        assert score == IntentScore(Intent.CANCEL_APPOINTMENT, 0.8)

    def test_contact_boost_ignores_dates(self, classifier):
        score = classifier.classify("annuler mon rendez-vous", [_entity(EntityType.DATE)])
        assert score.confidence == 0.6

    def test_emergency_floor(self, classifier):
        assert classifier.classify("sos", []) == IntentScore(Intent.EMERGENCY, 0.9)

    def test_ties_broken_by_table_priority(self, classifier):
        # greeting and help both score 0.6; help has the lower priority number
        scores = classifier.score_all("bonjour aidez-moi", [])
        assert scores[Intent.GREETING] == scores[Intent.HELP] == 0.6
        assert classifier.classify("bonjour aidez-moi", []).intent == Intent.HELP

    def test_boosted_score_beats_priority(self, classifier):
        text = "apres l annulation je voudrais prendre rendez-vous demain"
        scores = classifier.score_all(text, [_entity(EntityType.DATE)])
        assert scores[Intent.CANCEL_APPOINTMENT] == 0.6
        assert classifier.classify(text, [_entity(EntityType.DATE)]) == IntentScore(Intent.BOOK_APPOINTMENT, 0.8)

    def test_score_all_lists_every_matching_intent(self, classifier):
        scores = classifier.score_all("je voudrais prendre rendez-vous pour voir les disponibilites", [])
        assert set(scores) == {Intent.BOOK_APPOINTMENT, Intent.CHECK_AVAILABILITY}


class TestContextAdjuster:
    """Tests for ContextAdjuster."""

    def test_availability_then_booking_boosted(self, adjuster):
        score = adjuster.adjust(IntentScore(Intent.BOOK_APPOINTMENT, 0.6), "je reserve", "check_availability")
        assert score == IntentScore(Intent.BOOK_APPOINTMENT, 0.8)

    def test_follow_up_boost_capped(self, adjuster):
        score = adjuster.adjust(IntentScore(Intent.BOOK_APPOINTMENT, 0.9), "je reserve", "check_availability")
        assert score.confidence == 0.95

    def test_affirmative_after_booking_forced(self, adjuster):
        score = adjuster.adjust(IntentScore(Intent.FALLBACK, 0.0), "oui", "book_appointment")
        assert score == IntentScore(Intent.BOOK_APPOINTMENT, 0.9)

    def test_affirmative_without_booking_context_unchanged(self, adjuster):
        score = adjuster.adjust(IntentScore(Intent.FALLBACK, 0.0), "oui", "clinic_info")
        assert score == IntentScore(Intent.FALLBACK, 0.0)

    def test_unknown_previous_intent_skips_rules(self, adjuster, caplog):
        with caplog.at_level(logging.DEBUG, logger="nova.classification.context"):
            score = adjuster.adjust(IntentScore(Intent.FALLBACK, 0.0), "oui", "order_pizza")
        assert score == IntentScore(Intent.FALLBACK, 0.0)
        assert "Unknown previous intent" in caplog.text

    @pytest.mark.parametrize("text,expected", [
        ("sos", 0.7),
        ("j ai mal", 0.8),
        ("j ai tres mal c est urgent aidez-moi maintenant", 0.9),
        ("urgence douleur mal tout de suite maintenant", 0.98),
    ])
    def test_emergency_keyword_scoring(self, adjuster, text, expected):
        score = adjuster.adjust(IntentScore(Intent.EMERGENCY, 0.9), text)
        assert score.confidence == expected

    def test_repeated_keyword_counted_once(self, adjuster):
        score = adjuster.adjust(IntentScore(Intent.EMERGENCY, 0.9), "mal mal mal")
        assert score.confidence == 0.8

    def test_other_intents_untouched(self, adjuster):
        score = adjuster.adjust(IntentScore(Intent.CLINIC_INFO, 0.6), "adresse du cabinet")
        assert score == IntentScore(Intent.CLINIC_INFO, 0.6)
