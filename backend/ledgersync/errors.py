"""
Error taxonomy for the ledger sync core.

Everything raised by the core derives from LedgerError so the HTTP layer can
map the whole family with one set of exception handlers.
"""
from typing import Any, Optional


class LedgerError(Exception):
    """Base class for all core errors."""


class ProviderUnavailable(LedgerError):
    """No signing provider / no active identity. Fatal, not retried."""


class NotInitialized(LedgerError):
    """A gateway operation was invoked before initialize() completed."""


class RpcError(LedgerError):
    """JSON-RPC error object returned by the endpoint or the signing provider."""

    def __init__(self, code: Optional[int], message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"[{self.code}] {self.message}"


class NetworkMismatch(LedgerError):
    """Network negotiation ended in the Failed state."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class WriteRejected(LedgerError):
    """The ledger rejected a state-changing call (revert, duplicate id, unauthorized)."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class ConfirmationTimeout(LedgerError):
    """A submitted transaction was not confirmed within the receipt timeout."""

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(f"Transaction {tx_hash} not confirmed after {timeout:.0f}s")
        self.tx_hash = tx_hash
        self.timeout = timeout


class InvalidInput(LedgerError):
    """Caller input failed validation; raised before any network call."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class DeviceNotFound(LedgerError):
    """A human-chosen device id does not exist on the ledger."""

    def __init__(self, device_id: str):
        super().__init__(f"Device not found: {device_id}")
        self.device_id = device_id
