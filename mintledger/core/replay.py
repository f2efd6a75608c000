"""
mintledger/core/replay.py

Event Log Replay

Re-derives the record lifecycle from a JSONL event log written by
JsonlEventSink and checks that the log describes a legal history.

Laws enforced here:
    1. Load     → json.loads(line) + event_from_payload()  — malformed line is fatal
    2. Sequence → strictly sequential from the first line's sequence
    3. Ids      → a Minted/Combined id is never seen twice
    4. Deleted  → only an active id can be deleted
    5. Combined → immediately followed by Deleted(source1), Deleted(source2)
    6. Balance  → a withdrawal never exceeds the fees accrued and not yet withdrawn

A log may span several processes, each with its own capability, because
JsonlEventSink continues an existing file. The balance law is therefore
checked against the fees still unwithdrawn across the whole log, not per
capability: a restarted process that withdraws only its own fees is legal.

Usage:
    engine = EventReplay(price=1)
    engine.load(Path(".mintledger/events.jsonl"))
    summary = engine.verify()
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from mintledger.core.canonical import canonical_hash
from mintledger.core.exceptions import ReplayError
from mintledger.core.models import PRICE, EventType, event_from_payload

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Result / Summary Types
# ─────────────────────────────────────────────────────────────

@dataclass
class LoggedEvent:
    """One parsed line of the event log."""
    sequence:   int
    timestamp:  str
    event_type: str
    payload:    Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReplayViolation:
    """A single detected violation in the event log."""
    at_sequence:    int
    violation_type: str   # "sequence_gap" | "reused_id" | "unknown_record" | "combine_order" | "balance"
    detail:         str


@dataclass
class ReplaySummary:
    """Aggregate result of a full event log replay."""
    total_events:      int
    valid:             bool
    violations:        List[ReplayViolation]
    event_type_counts: Dict[str, int]
    active_records:    List[str]
    destroyed_records: List[str]
    minted:            int
    combined:          int
    burned:            int
    withdrawn_total:   int
    accrued_balance:   int
    head_hash:         Optional[str]
    first_timestamp:   Optional[str]
    last_timestamp:    Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ─────────────────────────────────────────────────────────────
# Replay Engine
# ─────────────────────────────────────────────────────────────

class EventReplay:
    """
    Sequential replay of a mintledger event log.

    Internal state:
        self.events     — List[LoggedEvent] in file order
        self.violations — populated by verify()
    """

    def __init__(self, price: int = PRICE):
        self.price:      int                   = price
        self.events:     List[LoggedEvent]     = []
        self.violations: List[ReplayViolation] = []

    # ── Load ──────────────────────────────────────────────────

    def load(self, log_path: Path) -> None:
        """
        Load an event log.

        Raises:
            FileNotFoundError — log file does not exist
            ReplayError       — malformed JSON or unknown event shape
        """
        log_path = Path(log_path)
        if not log_path.exists():
            raise FileNotFoundError(f"Event log not found: {log_path}")

        self.events = []
        line_num = 0
        try:
            with open(log_path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    self.events.append(self._parse_line(line, line_num))
        except UnicodeDecodeError as exc:
            raise ReplayError(
                f"Event log is not valid UTF-8 after line {line_num}: {exc}",
                {"line": line_num + 1},
            ) from exc

        logger.debug("Loaded %d events from %s", len(self.events), log_path)

    def load_events(self, events: List[LoggedEvent]) -> None:
        self.events = list(events)

    # ── Verify ────────────────────────────────────────────────

    def verify(self) -> ReplaySummary:
        """Replay every loaded event and return the summary."""
        self.violations = []

        active:    Set[str]       = set()
        destroyed: List[str]      = []
        seen_ids:  Set[str]       = set()
        counts:    Dict[str, int] = {}

        minted = combined = burned = 0
        withdrawn_total = 0
        accrued         = 0
        pending_deletes: List[str] = []

        for i, event in enumerate(self.events):
            seq = event.sequence
            counts[event.event_type] = counts.get(event.event_type, 0) + 1

            expected_seq = self.events[0].sequence + i
            if seq != expected_seq:
                self._violation(seq, "sequence_gap", f"expected sequence {expected_seq}, got {seq}")

            if pending_deletes and event.event_type != EventType.DELETED:
                self._violation(
                    seq, "combine_order",
                    f"combined source {pending_deletes[0]} was not deleted before {event.event_type}",
                )
                pending_deletes = []

            p = event.payload

            if event.event_type == EventType.MINTED:
                self._introduce(seq, p["record_id"], active, seen_ids)
                minted  += 1
                accrued += self.price

            elif event.event_type == EventType.COMBINED:
                self._introduce(seq, p["new_id"], active, seen_ids)
                combined += 1
                pending_deletes = [p["source1_id"], p["source2_id"]]

            elif event.event_type == EventType.DELETED:
                record_id = p["record_id"]
                if pending_deletes:
                    expected = pending_deletes.pop(0)
                    if record_id != expected:
                        self._violation(
                            seq, "combine_order",
                            f"expected deletion of {expected}, got {record_id}",
                        )
                        pending_deletes = []
                        burned += 1
                else:
                    burned += 1
                if record_id in active:
                    active.discard(record_id)
                    destroyed.append(record_id)
                else:
                    self._violation(seq, "unknown_record", f"deleted record {record_id} is not active")

            elif event.event_type == EventType.BALANCE_WITHDRAWN:
                amount = p["amount"]
                if amount <= 0 or amount > accrued:
                    self._violation(
                        seq, "balance",
                        f"withdrew {amount}, accrued balance was {accrued}",
                    )
                withdrawn_total += amount
                accrued -= amount

        if pending_deletes:
            last_seq = self.events[-1].sequence
            self._violation(
                last_seq, "combine_order",
                f"log ends before combined source {pending_deletes[0]} was deleted",
            )

        last = self.events[-1] if self.events else None
        return ReplaySummary(
            total_events=      len(self.events),
            valid=             not self.violations,
            violations=        list(self.violations),
            event_type_counts= counts,
            active_records=    sorted(active),
            destroyed_records= destroyed,
            minted=            minted,
            combined=          combined,
            burned=            burned,
            withdrawn_total=   withdrawn_total,
            accrued_balance=   accrued,
            head_hash=         canonical_hash(last.to_dict()) if last else None,
            first_timestamp=   self.events[0].timestamp if self.events else None,
            last_timestamp=    last.timestamp if last else None,
        )

    # ── Internal ──────────────────────────────────────────────

    def _parse_line(self, line: str, line_num: int) -> LoggedEvent:
        try:
            data = json.loads(line)
            event = LoggedEvent(
                sequence=   data["sequence"],
                timestamp=  data["timestamp"],
                event_type= data["event_type"],
                payload=    data["payload"],
            )
            # Shape check: rejects unknown types and missing/extra payload keys.
            typed = event_from_payload(event.event_type, event.payload)
        except (ValueError, KeyError, TypeError) as exc:
            raise ReplayError(
                f"Malformed event at line {line_num}: {exc}",
                {"line": line_num},
            ) from exc
        problems = []
        if not _is_int(event.sequence):
            problems.append("sequence must be int")
        if not isinstance(event.timestamp, str):
            problems.append("timestamp must be str")
        for f in fields(typed):
            value = getattr(typed, f.name)
            ok = _is_int(value) if f.type is int else isinstance(value, f.type)
            if not ok:
                problems.append(f"{f.name} must be {f.type.__name__}, got {type(value).__name__}")
        if problems:
            raise ReplayError(
                f"Malformed event at line {line_num}: {'; '.join(problems)}",
                {"line": line_num},
            )
        return event

    def _introduce(self, seq: int, record_id: str, active: Set[str], seen_ids: Set[str]) -> None:
        if record_id in seen_ids:
            self._violation(seq, "reused_id", f"record id {record_id} was already used")
        seen_ids.add(record_id)
        active.add(record_id)

    def _violation(self, seq: int, violation_type: str, detail: str) -> None:
        self.violations.append(ReplayViolation(seq, violation_type, detail))


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
