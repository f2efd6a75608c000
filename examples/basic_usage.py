"""
mintledger: Basic Usage Example

Demonstrates:
- Bring-up of the issuer capability
- Minting against a payment, with change
- Combining two records
- Withdrawing accrued fees
- Replaying the event log
"""

import logging
from pathlib import Path

from mintledger import AssetLedger, CoinAuthority, EventReplay, LedgerConfig


def main():
    """Basic mintledger usage."""
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    log_path = Path(".mintledger/example-events.jsonl")
    if log_path.exists():
        log_path.unlink()

    print("=" * 60)
    print("mintledger: Basic Usage Example")
    print("=" * 60)
    print()

    # 1. Bring-up
    authority = CoinAuthority()
    ledger    = AssetLedger.from_config(
        LedgerConfig(event_log=str(log_path)),
        coin_authority=authority,
    )
    cap = ledger.bring_up("deployer")
    print(f"1. Issuer capability {cap.capability_id} (balance {cap.accrued_balance})")

    # 2. Mint two records
    payment = authority.mint(1_000_000_000)
    sunrise, change = ledger.mint("alice", "Sunrise", "Morning sky", "ipfs://sunrise", payment, cap)
    sunset, change  = ledger.mint("alice", "Sunset", "Evening sky", "ipfs://sunset", change, cap)
    print(f"2. Minted {ledger.name(sunrise)} and {ledger.name(sunset)}; change {change.amount()}")

    # 3. Combine them
    day = ledger.combine(sunrise, sunset, "ipfs://day")
    ledger.ownership.transfer(day, "alice")
    print(f"3. Combined into {ledger.name(day)} -> {ledger.media_reference(day)}")

    # 4. Withdraw fees
    fees = ledger.withdraw(cap)
    print(f"4. Withdrew {fees.amount()}; balance now {cap.accrued_balance}")

    # 5. Replay
    engine = EventReplay()
    engine.load(log_path)
    summary = engine.verify()
    print(f"5. Replayed {summary.total_events} events, consistent={summary.valid}")


if __name__ == "__main__":
    main()
