"""Store, ledger and analyzer failure types.

Handlers catch ``StoreError`` and report its message as a tool-level
failure; nothing here maps to a JSON-RPC error.
"""


class StoreError(Exception):
    """Base class for every store-side failure."""


class NotFoundError(StoreError):
    """Unknown ID or unresolvable path."""


class FolderNotEmptyError(StoreError):
    """Non-recursive delete of a folder that still has children."""


class InvalidArgumentError(StoreError):
    """Empty filename, empty path segment or similar malformed input."""


class AlreadyExistsError(StoreError):
    """Target exists and the caller did not allow replacing it."""


class BackendError(StoreError):
    """The remote API failed, possibly after exhausting retries.

    Attributes:
        status: HTTP status code when the failure came from a response
        retryable: Whether the failure is transient (rate limit, 5xx, network)
        retry_after: Server-requested delay in seconds, from ``Retry-After``
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        retryable: bool = False,
        retry_after: float | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.retryable = retryable
        self.retry_after = retry_after
