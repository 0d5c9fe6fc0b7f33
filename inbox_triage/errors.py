"""Exception types shared across the triage engine."""


class TriageError(Exception):
    """Base class for all inbox triage errors."""
    pass


class ConfigError(TriageError):
    """Raised when an environment setting cannot be parsed or is out of range."""
    pass


class ContextLoadError(TriageError):
    """Raised when the canned-response knowledge base is missing or malformed."""
    pass


class InitializationError(TriageError):
    """Raised when labels or the similarity scorer cannot be brought up.

    Triage must not run until initialization has succeeded.
    """
    pass


class TransientError(TriageError):
    """Errors that may resolve on retry (network, API rate limit, timeout)."""
    pass


class PermanentError(TriageError):
    """Errors that won't resolve on retry (auth revoked, bad request, not found)."""
    pass
