"""
Nova - Error Classes

Exceptions raised at the edges of the system:
- InputTooLong: message rejected at the boundary before the core runs
- PatternTableError: malformed pattern tables at startup
- UpstreamError: collaborator (appointment service, directory) failures
- ContractViolation: collaborator payload missing required fields

The NLU core itself never raises per turn: unparsable entities, unmatched
intents and inconsistent context all degrade to non-fatal results.
"""


class NovaError(Exception):
    """Base class for nova errors."""
    pass


class InputTooLong(NovaError, ValueError):
    """Raised when a message exceeds the accepted length."""

    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(f"Message is {length} characters long, limit is {limit}")


class PatternTableError(NovaError):
    """Raised when a pattern table cannot be loaded or compiled."""
    pass


class UpstreamError(NovaError):
    """Raised when an external collaborator fails."""
    pass


class ContractViolation(NovaError):
    """Raised when a collaborator response violates its contract."""
    pass
