"""
mintledger/core/emitter.py

Event sinks.

The ledger core knows only the EventSink protocol: one synchronous
emit(event) call per completed transition, in operation order. Transport
lives here.

JsonlEventSink contract — emit() MUST, in this exact order:
  1. Acquire lock
  2. Build the log line (sequence, timestamp, event_type, payload)
  3. Append canonical JSON line to the log file
  4. Advance sequence — only after confirmed write
"""

import json
import logging
import threading
import warnings
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from mintledger.core.canonical import canonicalize
from mintledger.core.exceptions import LedgerError
from mintledger.core.time import event_timestamp

logger = logging.getLogger(__name__)


@runtime_checkable
class EventSink(Protocol):
    """Anything that accepts ledger events synchronously."""

    def emit(self, event) -> None: ...


class MemoryEventSink:
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self._lock:   threading.Lock = threading.Lock()
        self._events: List[Any]      = []

    def emit(self, event) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[Any]:
        with self._lock:
            return list(self._events)

    def of_type(self, event_type: str) -> List[Any]:
        return [e for e in self.events if e.event_type == event_type]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class FanoutEventSink:
    """Forwards each event to every wrapped sink, in order."""

    def __init__(self, sinks: Iterable[EventSink]) -> None:
        self.sinks: List[EventSink] = list(sinks)

    def emit(self, event) -> None:
        for sink in self.sinks:
            sink.emit(event)


class JsonlEventSink:
    """
    Append-only JSONL event log.

    One canonical JSON object per line:
        {"event_type": ..., "payload": {...}, "sequence": n, "timestamp": ...}

    Thread-safe via internal lock (single-process only).
    Sequence survives process restart by reading the last line on __init__.
    """

    def __init__(self, log_path: str = ".mintledger/events.jsonl") -> None:
        self._lock:     threading.Lock = threading.Lock()
        self._sequence: int            = 0

        self._log_file = Path(log_path)
        self._log_file.parent.mkdir(parents=True, exist_ok=True)

        self._restore_state()

    @property
    def log_file(self) -> Path:
        return self._log_file

    @property
    def next_sequence(self) -> int:
        return self._sequence

    def emit(self, event) -> None:
        """
        Append one event. Raises LedgerError on write failure;
        the sequence does not advance in that case.
        """
        with self._lock:
            line = self._build_line(event)
            self._append(line)
            self._sequence += 1
        logger.debug("Logged %s event at sequence %d", event.event_type, line["sequence"])

    # ── Internal ──────────────────────────────────────────────

    def _build_line(self, event) -> Dict[str, Any]:
        return {
            "sequence":   self._sequence,
            "timestamp":  event_timestamp(),
            "event_type": event.event_type,
            "payload":    event.to_payload(),
        }

    def _append(self, line: Dict[str, Any]) -> None:
        try:
            with open(self._log_file, "ab") as f:
                f.write(canonicalize(line) + b"\n")
        except OSError as exc:
            raise LedgerError(
                f"Event log write failed — {exc}",
                {"log_file": str(self._log_file)},
            ) from exc

    def _restore_state(self) -> None:
        """
        Continue the sequence from an existing log.
        Safe on empty or missing file. If the last line is corrupted,
        or the file is not valid UTF-8, the sequence stays at 0 and a
        RuntimeWarning is issued.
        """
        if not self._log_file.exists():
            return

        last_line: Optional[str] = None
        try:
            with open(self._log_file, "r", encoding="utf-8") as f:
                for line in f:
                    stripped = line.strip()
                    if stripped:
                        last_line = stripped
            if not last_line:
                return
            self._sequence = int(json.loads(last_line)["sequence"]) + 1
        except (ValueError, KeyError, TypeError) as exc:
            warnings.warn(
                f"JsonlEventSink: could not restore sequence from {self._log_file}: {exc}. "
                "Last line may be corrupted. Run `mintledger replay` before emitting.",
                RuntimeWarning,
                stacklevel=3,
            )
