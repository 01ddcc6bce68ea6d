"""Exception hierarchy for the DAppChain client."""

from typing import Any


class DAppChainError(Exception):
    """Base exception for all DAppChain client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotConfiguredError(DAppChainError):
    """Raised when a required RPC client has not been set."""

    def __init__(self, client_name: str, details: dict | None = None):
        super().__init__(f"{client_name.capitalize()} client is not set", details)
        self.client_name = client_name


class NotFoundError(DAppChainError):
    """Raised when a contract name cannot be resolved."""

    def __init__(self, message: str, name: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.name = name


class CommitError(DAppChainError):
    """Raised when the chain rejects a transaction."""

    def __init__(self, message: str, code: int, error: str | None, details: dict | None = None):
        super().__init__(message, details)
        self.code = code
        self.error = error


class TxCommitError(CommitError):
    """Raised when the check or deliver stage returns a non-zero code."""

    def __init__(
        self,
        stage: str,
        code: int,
        error: str | None,
        details: dict | None = None,
    ):
        super().__init__(f"{stage} failed with code {code}: {error or ''}", code, error, details)
        self.stage = stage


class InvalidTxNonceError(CommitError):
    """Raised when a transaction is rejected because of a stale nonce."""

    def __init__(self, code: int, error: str | None, details: dict | None = None):
        super().__init__(f"Invalid tx nonce (code {code}): {error or ''}", code, error, details)


class CommitTimeoutError(DAppChainError, TimeoutError):
    """Raised when a commit attempt does not finish within its timeout."""

    def __init__(self, timeout: float, details: dict | None = None):
        super().__init__(f"Transaction commit timed out after {timeout}s", details)
        self.timeout = timeout


class DeserializationError(DAppChainError):
    """Raised when a response payload cannot be converted to the requested type."""

    def __init__(
        self,
        message: str,
        target: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.target = target
        self.value = value


class NetworkError(DAppChainError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class RpcError(DAppChainError):
    """Raised when the node answers a request with a JSON-RPC error object."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        data: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.code = code
        self.data = data


class ValidationError(DAppChainError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value
