# =============================================================================
# RWS Client -- Error Types
# =============================================================================
#
# Connection failures are never raised to callers; they are reported through
# the on_error / on_close hooks.  These types cover the remaining cases.
# =============================================================================


class RWSError(Exception):
    """Base exception for all client errors."""


class RWSConnectionError(RWSError):
    """Connection-related errors (failed to connect, lost connection)."""


class RWSConfigError(RWSError, ValueError):
    """Invalid client options."""


class RWSEncodeError(RWSError, TypeError):
    """A message body could not be serialized to JSON text."""
