from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base class for every failure raised by the ledger core.

    Callers branch on the exception type (or ``code``), never on the message.
    """

    code = "ledger_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            payload["context"] = {key: str(value) for key, value in self.details.items()}
        return payload


class ValidationError(LedgerError):
    """Malformed input. Raised before anything is mutated."""

    code = "validation_error"


class InvalidStateError(LedgerError):
    """Transition attempted from a state that does not allow it.

    Usually a stale client view; reload and show the current state instead of retrying.
    """

    code = "invalid_state"


class NotFoundError(LedgerError):
    code = "not_found"
