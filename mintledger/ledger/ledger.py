"""
mintledger/ledger/ledger.py

AssetLedger — the capability-gated asset state machine.

Operations:
    mint(recipient, name, description, media_reference, payment, capability)
        → (AssetRecord, remainder Coin)
    combine(record_a, record_b, new_media_reference) → AssetRecord
    burn(record)
    withdraw(capability) → Coin

Every operation validates, then emits its events, then mutates. A raised
exception, including one from the event sink, leaves ledger state untouched.
A sink that fails partway through a multi-event operation may already hold
the earlier events of that operation.

Lock order: capability lock, then record lock. Never the reverse.
"""

import logging
import threading
import uuid
from typing import Dict, List, Optional, Set, Tuple

from mintledger.config import (
    DEFAULT_COMBINED_DESCRIPTION,
    DEFAULT_COMBINED_NAME,
    LedgerConfig,
)
from mintledger.core.coin import Coin, CoinAuthority
from mintledger.core.emitter import (
    EventSink,
    FanoutEventSink,
    JsonlEventSink,
    MemoryEventSink,
)
from mintledger.core.exceptions import (
    ConsumedObjectError,
    InsufficientBalance,
    InsufficientPayment,
    LedgerError,
)
from mintledger.core.models import (
    AssetRecord,
    BalanceWithdrawn,
    Combined,
    Deleted,
    IssuerCapability,
    Minted,
    PRICE,
)
from mintledger.core.ownership import OwnershipRegistry

logger = logging.getLogger(__name__)


class AssetLedger:
    """
    Synchronous asset ledger.

    Record state:
        _records  — active records by id
        _retired  — ids of destroyed records; never handed out again

    Holding the IssuerCapability returned by bring_up() is the only
    permission check for mint() and withdraw().
    """

    def __init__(
        self,
        coin_authority:       Optional[CoinAuthority]     = None,
        ownership:            Optional[OwnershipRegistry] = None,
        sink:                 Optional[EventSink]         = None,
        price:                int                         = PRICE,
        combined_name:        str                         = DEFAULT_COMBINED_NAME,
        combined_description: str                         = DEFAULT_COMBINED_DESCRIPTION,
    ) -> None:
        if not isinstance(price, int) or isinstance(price, bool) or price < 1:
            raise ValueError(f"price must be a positive int, got {price!r}")

        self.ledger_id            = f"ledger-{uuid.uuid4()}"
        self.coin_authority       = coin_authority or CoinAuthority()
        self.ownership            = ownership or OwnershipRegistry()
        self.sink                 = sink if sink is not None else MemoryEventSink()
        self.price                = price
        self.combined_name        = combined_name
        self.combined_description = combined_description

        self._records_lock:  threading.RLock         = threading.RLock()
        self._records:       Dict[str, AssetRecord]  = {}
        self._retired:       Set[str]                = set()

        self._bring_up_lock: threading.Lock              = threading.Lock()
        self._capability:    Optional[IssuerCapability]  = None

    @classmethod
    def from_config(
        cls,
        config:         LedgerConfig,
        coin_authority: Optional[CoinAuthority]     = None,
        ownership:      Optional[OwnershipRegistry] = None,
        sinks:          Optional[List[EventSink]]   = None,
    ) -> "AssetLedger":
        """
        Build a ledger from configuration.

        Events go to every sink in `sinks`, plus a JsonlEventSink when
        config.event_log is set. With neither, a MemoryEventSink is used.
        """
        all_sinks = list(sinks or [])
        if config.event_log:
            all_sinks.append(JsonlEventSink(config.event_log))

        if not all_sinks:
            sink = MemoryEventSink()
        elif len(all_sinks) == 1:
            sink = all_sinks[0]
        else:
            sink = FanoutEventSink(all_sinks)

        return cls(
            coin_authority=       coin_authority,
            ownership=            ownership,
            sink=                 sink,
            price=                config.price,
            combined_name=        config.combined_name,
            combined_description= config.combined_description,
        )

    # ── Bring-up ──────────────────────────────────────────────

    def bring_up(self, deployer: str) -> IssuerCapability:
        """
        Create the single IssuerCapability (balance 0) and give it to deployer.
        Raises LedgerError if called more than once.
        """
        with self._bring_up_lock:
            if self._capability is not None:
                raise LedgerError(
                    "Issuer capability already created",
                    {"ledger_id": self.ledger_id},
                )
            capability = IssuerCapability(self.ledger_id)
            self.ownership.transfer(capability, deployer)
            self._capability = capability

        logger.info("Ledger %s brought up; issuer capability held by %s", self.ledger_id, deployer)
        return capability

    # ── Public API ────────────────────────────────────────────

    def mint(
        self,
        recipient:       str,
        name:            str,
        description:     str,
        media_reference: str,
        payment:         Coin,
        capability:      IssuerCapability,
    ) -> Tuple[AssetRecord, Coin]:
        """
        Mint a new record for recipient, charging self.price from payment.

        The price portion of the payment is consumed. The capability's
        balance grows by exactly self.price, funded with fresh currency
        from the coin authority.

        Returns:
            (new record owned by recipient, remainder of the payment)

        Raises:
            InsufficientPayment — payment.amount() < price
        """
        self._check_capability(capability)
        _require_principal(recipient)

        with capability._lock, self._records_lock:
            paid = payment.amount()
            if paid < self.price:
                logger.warning("Mint rejected: payment %d below price %d", paid, self.price)
                raise InsufficientPayment(
                    "Payment does not cover the mint price",
                    {"paid": paid, "price": self.price},
                )

            # Staged: nothing is mutated until the sink accepts the event.
            record = self._new_record(name, description, media_reference)
            self.sink.emit(Minted(record_id=record.record_id, recipient=recipient))

            if paid > self.price:
                remainder, charged = payment.split(self.price)
            else:
                charged, remainder = payment, Coin.zero()
            charged.consume()

            self._records[record.record_id] = record
            capability._accrue(self.coin_authority.mint(self.price))
            self.ownership.transfer(record, recipient)

        logger.debug("Minted asset %s for %s", record.record_id, recipient)
        return record, remainder

    def combine(
        self,
        record_a:            AssetRecord,
        record_b:            AssetRecord,
        new_media_reference: str,
    ) -> AssetRecord:
        """
        Merge two records into a new, unowned one. Both inputs are destroyed.

        Emits Combined, then Deleted for record_a, then Deleted for record_b.
        The caller assigns ownership of the result.
        """
        with self._records_lock:
            self._ensure_active(record_a)
            self._ensure_active(record_b)
            if record_a is record_b or record_a.record_id == record_b.record_id:
                raise ConsumedObjectError(
                    "Cannot combine a record with itself",
                    {"record_id": record_a.record_id},
                )

            combined = self._new_record(
                self.combined_name,
                self.combined_description,
                new_media_reference,
            )
            self._emit_all([
                Combined(
                    source1_id= record_a.record_id,
                    source2_id= record_b.record_id,
                    new_id=     combined.record_id,
                ),
                Deleted(record_id=record_a.record_id),
                Deleted(record_id=record_b.record_id),
            ])

            self._records[combined.record_id] = combined
            self._retire(record_a)
            self._retire(record_b)

        logger.debug(
            "Combined %s and %s into %s",
            record_a.record_id, record_b.record_id, combined.record_id,
        )
        return combined

    def burn(self, record: AssetRecord) -> None:
        """Destroy a record. Emits Deleted."""
        with self._records_lock:
            self._ensure_active(record)
            self.sink.emit(Deleted(record_id=record.record_id))
            self._retire(record)
        logger.debug("Burned asset %s", record.record_id)

    def withdraw(self, capability: IssuerCapability) -> Coin:
        """
        Drain the capability's entire accrued balance.

        Raises:
            InsufficientBalance — nothing has accrued
        """
        self._check_capability(capability)

        with capability._lock:
            amount = capability.accrued_balance
            if amount == 0:
                logger.warning("Withdraw rejected: no accrued balance on %s", capability.capability_id)
                raise InsufficientBalance(
                    "No accrued balance to withdraw",
                    {"capability_id": capability.capability_id},
                )
            self.sink.emit(BalanceWithdrawn(amount=amount))
            coin = capability._drain()

        logger.info("Withdrew %d from %s", amount, capability.capability_id)
        return coin

    # ── Projections ───────────────────────────────────────────

    def name(self, record: AssetRecord) -> str:
        record.ensure_active()
        return record.name

    def description(self, record: AssetRecord) -> str:
        record.ensure_active()
        return record.description

    def media_reference(self, record: AssetRecord) -> str:
        record.ensure_active()
        return record.media_reference

    # ── Lookup ────────────────────────────────────────────────

    def resolve(self, record_id: str) -> Optional[AssetRecord]:
        """Return the active record with this id, or None."""
        with self._records_lock:
            return self._records.get(record_id)

    def is_active(self, record_id: str) -> bool:
        return self.resolve(record_id) is not None

    def active_records(self) -> List[AssetRecord]:
        with self._records_lock:
            return list(self._records.values())

    def get_stats(self) -> Dict[str, object]:
        """Return current ledger state snapshot."""
        with self._records_lock:
            active  = len(self._records)
            retired = len(self._retired)
        return {
            "ledger_id":       self.ledger_id,
            "price":           self.price,
            "active_records":  active,
            "retired_records": retired,
            "accrued_balance": self._capability.accrued_balance if self._capability else None,
            "total_supply":    self.coin_authority.total_supply,
        }

    # ── Internal ──────────────────────────────────────────────

    def _check_capability(self, capability: IssuerCapability) -> None:
        if not isinstance(capability, IssuerCapability) or capability is not self._capability:
            raise LedgerError(
                "Capability was not issued by this ledger",
                {"ledger_id": self.ledger_id},
            )

    def _ensure_active(self, record: AssetRecord) -> None:
        record.ensure_active()
        if self._records.get(record.record_id) is not record:
            raise ConsumedObjectError(
                "Asset record is not active in this ledger",
                {"record_id": record.record_id},
            )

    def _new_record(self, name: str, description: str, media_reference: str) -> AssetRecord:
        """Build an unregistered record with an id never seen by this ledger."""
        record = AssetRecord.create(name, description, media_reference)
        while record.record_id in self._records or record.record_id in self._retired:
            record = AssetRecord.create(name, description, media_reference)
        return record

    def _emit_all(self, events: List[object]) -> None:
        for event in events:
            self.sink.emit(event)

    def _retire(self, record: AssetRecord) -> None:
        record.consumed = True
        del self._records[record.record_id]
        self._retired.add(record.record_id)
        self.ownership.release(record.record_id)


def _require_principal(principal: str) -> None:
    if not isinstance(principal, str) or not principal:
        raise ValueError(f"recipient must be a non-empty string, got {principal!r}")
