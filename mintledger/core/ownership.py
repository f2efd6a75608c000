"""
mintledger/core/ownership.py

In-process ownership registry: who holds which object.

Any object with an ``object_id`` attribute and, optionally, a ``consumed``
flag can be transferred. Consumed objects cannot change hands.
"""

import threading
from typing import Dict, List, Optional

from mintledger.core.exceptions import ConsumedObjectError


class OwnershipRegistry:
    """Thread-safe map of object_id → owning principal."""

    def __init__(self) -> None:
        self._lock:   threading.Lock = threading.Lock()
        self._owners: Dict[str, str] = {}

    def transfer(self, obj, recipient: str) -> None:
        if not isinstance(recipient, str) or not recipient:
            raise ValueError(f"recipient must be a non-empty string, got {recipient!r}")
        if getattr(obj, "consumed", False):
            raise ConsumedObjectError(
                "Cannot transfer a consumed object",
                {"object_id": obj.object_id},
            )
        with self._lock:
            self._owners[obj.object_id] = recipient

    def owner_of(self, object_id: str) -> Optional[str]:
        with self._lock:
            return self._owners.get(object_id)

    def owned_by(self, principal: str) -> List[str]:
        with self._lock:
            return [oid for oid, owner in self._owners.items() if owner == principal]

    def release(self, object_id: str) -> None:
        """Forget an object that no longer exists. Unowned ids are ignored."""
        with self._lock:
            self._owners.pop(object_id, None)
