"""
tests/test_concurrency.py

Concurrency safety test for AssetLedger.
Mint and withdraw are read-modify-writes of the capability balance;
burn consumes its input. Neither may lose or duplicate work under threads.

Run:
    pytest tests/test_concurrency.py -v --tb=short
"""

import threading

from mintledger import (
    AssetLedger,
    CoinAuthority,
    ConsumedObjectError,
    EventReplay,
    EventType,
    InsufficientBalance,
    JsonlEventSink,
    MemoryEventSink,
)


class TestConcurrency:

    def test_concurrent_mints_lose_no_updates(self):
        authority = CoinAuthority()
        sink      = MemoryEventSink()
        ledger    = AssetLedger(coin_authority=authority, sink=sink)
        cap       = ledger.bring_up("deployer")
        errors    = []

        def mint_25():
            try:
                for i in range(25):
                    ledger.mint("alice", f"n{i}", "d", "m", authority.mint(3), cap)
            except Exception as e:
                errors.append(str(e))

        threads = [threading.Thread(target=mint_25) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == [], f"Concurrent mints raised exceptions: {errors}"
        assert cap.accrued_balance == 100
        assert len(ledger.active_records()) == 100
        assert len(sink.of_type(EventType.MINTED)) == 100
        assert ledger.withdraw(cap).amount() == 100

    def test_record_burned_exactly_once(self):
        authority = CoinAuthority()
        sink      = MemoryEventSink()
        ledger    = AssetLedger(coin_authority=authority, sink=sink)
        cap       = ledger.bring_up("deployer")
        record, _ = ledger.mint("alice", "x", "d", "m", authority.mint(1), cap)

        outcomes = []
        barrier  = threading.Barrier(8)

        def try_burn():
            barrier.wait()
            try:
                ledger.burn(record)
                outcomes.append("burned")
            except ConsumedObjectError:
                outcomes.append("rejected")

        threads = [threading.Thread(target=try_burn) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("burned") == 1
        assert outcomes.count("rejected") == 7
        assert len(sink.of_type(EventType.DELETED)) == 1

    def test_concurrent_log_writes_stay_sequential(self, tmp_path):
        authority = CoinAuthority()
        log_path  = tmp_path / "events.jsonl"
        ledger    = AssetLedger(coin_authority=authority, sink=JsonlEventSink(str(log_path)))
        cap       = ledger.bring_up("deployer")

        def mint_10():
            for i in range(10):
                ledger.mint("alice", f"n{i}", "d", "m", authority.mint(1), cap)

        threads = [threading.Thread(target=mint_10) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        engine = EventReplay()
        engine.load(log_path)
        summary = engine.verify()

        assert summary.total_events == 20
        assert summary.valid, summary.violations
        assert summary.accrued_balance == 20

    def test_withdraw_during_mints_loses_no_fees(self):
        authority = CoinAuthority()
        ledger    = AssetLedger(coin_authority=authority, sink=MemoryEventSink())
        cap       = ledger.bring_up("deployer")
        errors    = []
        withdrawn = []
        minting   = threading.Event()
        minting.set()

        def mint_25():
            try:
                for i in range(25):
                    ledger.mint("alice", f"n{i}", "d", "m", authority.mint(2), cap)
            except Exception as e:
                errors.append(str(e))

        def drain():
            while minting.is_set():
                try:
                    withdrawn.append(ledger.withdraw(cap).amount())
                except InsufficientBalance:
                    pass

        minters = [threading.Thread(target=mint_25) for _ in range(4)]
        drainer = threading.Thread(target=drain)
        drainer.start()
        for t in minters:
            t.start()
        for t in minters:
            t.join()
        minting.clear()
        drainer.join()

        assert errors == [], f"Concurrent mints raised exceptions: {errors}"
        assert all(amount > 0 for amount in withdrawn)
        assert sum(withdrawn) + cap.accrued_balance == 100
        assert len(ledger.active_records()) == 100
