from __future__ import annotations


class YtScribeError(Exception):
    """Base class for failures of a single user-triggered action."""


class ValidationFailure(YtScribeError, ValueError):
    """Input rejected before any network call (bad URL, blank query, ...)."""


class TransportFailure(YtScribeError):
    """A fetch or completion request was rejected or returned a non-success status."""


class CompletionError(TransportFailure):
    """The completion API call failed."""


class ContractViolation(YtScribeError):
    """Model output did not match the structured shape the caller expects."""


class PersistenceCorruption(YtScribeError):
    """The stored video collection could not be parsed."""


class OperationInProgress(YtScribeError):
    """A second call was issued while the same operation is still in flight."""
