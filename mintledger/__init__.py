"""
mintledger/__init__.py

mintledger: Capability-gated asset ledger

Mint unique asset records against a payment, accrue the mint fee on the
issuer capability, withdraw accrued fees, and combine or burn records.
Every transition emits one event to an injected sink.
"""

__version__ = "0.1.0"

from mintledger.config import LedgerConfig
from mintledger.core.coin import Coin, CoinAuthority
from mintledger.core.emitter import (
    EventSink,
    FanoutEventSink,
    JsonlEventSink,
    MemoryEventSink,
)
from mintledger.core.exceptions import (
    ConfigError,
    ConsumedObjectError,
    InsufficientBalance,
    InsufficientPayment,
    LedgerError,
    MintLedgerError,
    ReplayError,
)
from mintledger.core.models import (
    PRICE,
    AssetRecord,
    BalanceWithdrawn,
    Combined,
    Deleted,
    EventType,
    IssuerCapability,
    Minted,
)
from mintledger.core.ownership import OwnershipRegistry
from mintledger.core.replay import EventReplay, ReplaySummary
from mintledger.ledger.ledger import AssetLedger

__all__ = [
    # Ledger
    "AssetLedger",
    "AssetRecord",
    "IssuerCapability",
    "LedgerConfig",
    # Collaborators
    "Coin",
    "CoinAuthority",
    "OwnershipRegistry",
    "EventSink",
    "MemoryEventSink",
    "JsonlEventSink",
    "FanoutEventSink",
    # Events
    "EventType",
    "Minted",
    "Combined",
    "Deleted",
    "BalanceWithdrawn",
    # Replay
    "EventReplay",
    "ReplaySummary",
    # Errors
    "MintLedgerError",
    "InsufficientPayment",
    "InsufficientBalance",
    "ConsumedObjectError",
    "LedgerError",
    "ConfigError",
    "ReplayError",
    # Constants
    "PRICE",
]
