"""
mintledger Ledger - the asset state machine.
"""

from mintledger.ledger.ledger import AssetLedger

__all__ = ["AssetLedger"]
