# /brandflow/flows/errors.py

# Error taxonomy shared by the flows, the services they call and the HTTP layer.
# A malformed model response is NOT an error: the response parser absorbs it by
# substituting a fallback object with lower confidence.


class FlowError(Exception):
    """Base class for all flow failures."""


class ValidationError(FlowError):
    """The flow input is malformed. Raised before any I/O happens."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class GenerationError(FlowError):
    """The text-generation endpoint failed, timed out or returned no text."""


class PersistenceError(FlowError):
    """A document-store read or write failed."""
