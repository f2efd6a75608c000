"""Ledger primitives: records, currency, ownership, events, replay."""
