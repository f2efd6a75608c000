"""
mintledger/core/models.py

Ledger Data Model

CONTRACT 1 — AssetRecord
    record_id is unique for the lifetime of the ledger and never reused.
    states: Active → Destroyed. Destroyed is terminal.
    every consuming operation checks `consumed` before touching the record.

CONTRACT 2 — IssuerCapability
    exactly one per AssetLedger, created at bring-up with balance 0.
    accrued_balance changes only through _accrue() (mint) and _drain() (withdraw).
    callers hold the capability's lock for the whole read-modify-write.

CONTRACT 3 — Events
    immutable, one class per transition, payload is JSON-primitive only.
    event_type must be an EventType constant.
"""

import threading
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Set

from mintledger.core.coin import Coin
from mintledger.core.exceptions import ConsumedObjectError


# Smallest currency units charged per mint.
PRICE = 1


# ─────────────────────────────────────────────────────────────
# AssetRecord
# ─────────────────────────────────────────────────────────────

@dataclass(eq=False)
class AssetRecord:
    """A uniquely identified, single-owner asset record."""

    record_id:       str
    name:            str
    description:     str
    media_reference: str
    consumed:        bool = field(default=False, repr=False)

    @classmethod
    def create(cls, name: str, description: str, media_reference: str) -> "AssetRecord":
        return cls(
            record_id=       f"asset-{uuid.uuid4()}",
            name=            name,
            description=     description,
            media_reference= media_reference,
        )

    @property
    def object_id(self) -> str:
        return self.record_id

    def ensure_active(self) -> None:
        if self.consumed:
            raise ConsumedObjectError(
                "Asset record has already been destroyed",
                {"record_id": self.record_id},
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id":       self.record_id,
            "name":            self.name,
            "description":     self.description,
            "media_reference": self.media_reference,
        }


# ─────────────────────────────────────────────────────────────
# IssuerCapability
# ─────────────────────────────────────────────────────────────

class IssuerCapability:
    """
    Holding this object is the permission to mint and withdraw.

    The accrued balance is backed by a Coin minted from the currency
    authority, one price at a time.
    """

    def __init__(self, ledger_id: str) -> None:
        self.capability_id: str            = f"issuer-{uuid.uuid4()}"
        self.ledger_id:     str            = ledger_id
        self._balance:      Coin           = Coin.zero()
        self._lock:         threading.Lock = threading.Lock()

    @property
    def object_id(self) -> str:
        return self.capability_id

    @property
    def accrued_balance(self) -> int:
        return self._balance.amount()

    def _accrue(self, coin: Coin) -> None:
        self._balance = self._balance.join(coin)

    def _drain(self) -> Coin:
        drained       = self._balance
        self._balance = Coin.zero()
        return drained

    def __repr__(self) -> str:
        return (
            f"IssuerCapability(capability_id={self.capability_id!r}, "
            f"accrued_balance={self.accrued_balance})"
        )


# ─────────────────────────────────────────────────────────────
# Event Vocabulary
# ─────────────────────────────────────────────────────────────

class EventType:
    """Event type string constants. The ONLY valid values for event_type."""
    MINTED            = "minted"
    COMBINED          = "combined"
    DELETED           = "deleted"
    BALANCE_WITHDRAWN = "balance_withdrawn"


VALID_EVENT_TYPES: Set[str] = {
    EventType.MINTED,
    EventType.COMBINED,
    EventType.DELETED,
    EventType.BALANCE_WITHDRAWN,
}


@dataclass(frozen=True)
class Minted:
    record_id: str
    recipient: str

    event_type = EventType.MINTED

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Combined:
    source1_id: str
    source2_id: str
    new_id:     str

    event_type = EventType.COMBINED

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Deleted:
    record_id: str

    event_type = EventType.DELETED

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BalanceWithdrawn:
    amount: int

    event_type = EventType.BALANCE_WITHDRAWN

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


_EVENT_CLASSES = {
    EventType.MINTED:            Minted,
    EventType.COMBINED:          Combined,
    EventType.DELETED:           Deleted,
    EventType.BALANCE_WITHDRAWN: BalanceWithdrawn,
}


def event_from_payload(event_type: str, payload: Dict[str, Any]):
    """Rebuild an event from its logged form. Raises ValueError on unknown type."""
    if event_type not in VALID_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. "
            f"Valid: {sorted(VALID_EVENT_TYPES)}"
        )
    return _EVENT_CLASSES[event_type](**payload)
