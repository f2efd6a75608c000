"""
mintledger/core/coin.py

Fungible value in the smallest currency unit.

A Coin is a linear handle: split() and join() consume the coins they are
given and hand back new ones. Presenting a consumed coin again raises
ConsumedObjectError.
"""

import threading
import uuid
from typing import Tuple

from mintledger.core.exceptions import ConsumedObjectError


class Coin:
    """Opaque non-negative amount."""

    def __init__(self, amount: int) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise ValueError(f"amount must be non-negative int, got {amount!r}")
        self.coin_id:   str  = f"coin-{uuid.uuid4()}"
        self._amount:   int  = amount
        self._consumed: bool = False

    @classmethod
    def zero(cls) -> "Coin":
        return cls(0)

    @property
    def object_id(self) -> str:
        return self.coin_id

    @property
    def consumed(self) -> bool:
        return self._consumed

    def amount(self) -> int:
        self._ensure_live()
        return self._amount

    def split(self, n: int) -> Tuple["Coin", "Coin"]:
        """
        Split off n units.

        Returns (kept, removed) where removed holds exactly n units and
        kept holds the rest. This coin is consumed.
        """
        self._ensure_live()
        if not isinstance(n, int) or n < 0 or n > self._amount:
            raise ValueError(
                f"cannot split {n!r} units from a coin of {self._amount}"
            )
        total = self.consume()
        return Coin(total - n), Coin(n)

    def join(self, other: "Coin") -> "Coin":
        """Merge two coins into a new one. Both inputs are consumed."""
        if other is self:
            raise ValueError("cannot join a coin with itself")
        self._ensure_live()
        other._ensure_live()
        return Coin(self.consume() + other.consume())

    def consume(self) -> int:
        """Destroy this handle and return the amount it held."""
        self._ensure_live()
        self._consumed = True
        return self._amount

    def _ensure_live(self) -> None:
        if self._consumed:
            raise ConsumedObjectError(
                "Coin has already been consumed",
                {"coin_id": self.coin_id},
            )

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else str(self._amount)
        return f"Coin({state})"


class CoinAuthority:
    """
    The only source of fresh currency.

    Thread-safe. total_supply counts every unit ever minted.
    """

    def __init__(self) -> None:
        self._lock:         threading.Lock = threading.Lock()
        self._total_supply: int            = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def mint(self, amount: int) -> Coin:
        coin = Coin(amount)
        with self._lock:
            self._total_supply += amount
        return coin
