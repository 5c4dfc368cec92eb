"""
EthicalTrace Operation Outcomes

Every mutating registry operation returns an Outcome instead of raising.
An Outcome is either OK or carries exactly one StoreError, which pairs a
taxonomy kind with the numeric code the store reports for it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Failure taxonomy shared by all stores."""
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    NOT_FOUND = "NOT_FOUND"
    INVALID_RATING = "INVALID_RATING"
    ALREADY_REVIEWED = "ALREADY_REVIEWED"


@dataclass(frozen=True)
class StoreError:
    """A store-specific error: taxonomy kind, numeric code and label."""
    kind: ErrorKind
    code: int
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"err": self.code, "kind": self.kind.value, "name": self.name}


ERR_NOT_AUTHORIZED = StoreError(ErrorKind.NOT_AUTHORIZED, 100, "ERR-NOT-AUTHORIZED")


@dataclass(frozen=True)
class Outcome:
    """Result of a mutating operation."""
    error: Optional[StoreError] = None

    @classmethod
    def ok(cls) -> "Outcome":
        return cls()

    @classmethod
    def fail(cls, error: StoreError) -> "Outcome":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    @property
    def code(self) -> Optional[int]:
        return self.error.code if self.error else None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is None:
            return {"ok": True}
        return {"err": self.error.code}

    def __bool__(self) -> bool:
        return self.is_ok()
