"""
Custom exception hierarchy for the stock sync service.

Exceptions are categorized as:
- RetryableError: Transient errors (network, database) where a later attempt might succeed
- NonRetryableError: Permanent errors that need a configuration or data fix

Drain ticks never retry on their own; the categorization tells Celery tasks
that are allowed to retry (the full-run trigger) which failures qualify:
- autoretry_for=(RetryableError,)
- dont_autoretry_for=(NonRetryableError,)
"""


class StockSyncException(Exception):
    """Base exception for the stock sync service."""
    pass


# ============================================
# RETRYABLE ERRORS
# ============================================
class RetryableError(StockSyncException):
    """
    Base class for errors where a later attempt might succeed.

    - Network timeouts
    - Non-success statuses from the remote inventory API or WooCommerce
    - Temporary database unavailability
    """
    pass


class ExternalAPIError(RetryableError):
    """
    Error from an external API (remote inventory API, WooCommerce).

    Typically transient - the external service might recover.
    """
    def __init__(self, service: str, message: str, status_code: int = None):
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service} API error: {message}")


class ConnectionTimeoutError(RetryableError):
    """Connection or timeout error - typically transient."""
    pass


class QueueStoreError(RetryableError):
    """
    Transient error reading or writing the batch queue / run statistics.

    Examples: PostgREST connection failure, temporary unavailability
    """
    pass


# ============================================
# NON-RETRYABLE ERRORS
# ============================================
class NonRetryableError(StockSyncException):
    """
    Base class for errors that should NOT trigger retry.

    - Missing credentials
    - Missing queue tables
    - Malformed remote payloads
    """
    pass


class ConfigurationError(NonRetryableError):
    """
    Required configuration is missing.

    Needs configuration fix, not retry.
    """
    pass


class InvalidResponseError(NonRetryableError):
    """Remote payload could not be parsed into inventory items."""
    pass
