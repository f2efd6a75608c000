"""
mintledger Exception Hierarchy

All exceptions inherit from MintLedgerError for easy catching.
"""


class MintLedgerError(Exception):
    """Base exception for all mintledger errors"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InsufficientPayment(MintLedgerError):
    """Raised when a mint payment is below the price"""
    pass


class InsufficientBalance(MintLedgerError):
    """Raised when withdrawing from a capability with nothing accrued"""
    pass


class ConsumedObjectError(MintLedgerError):
    """Raised when a consumed record or coin handle is presented again"""
    pass


class LedgerError(MintLedgerError):
    """Raised when ledger wiring or event log operations fail"""
    pass


class ConfigError(MintLedgerError):
    """Raised when configuration is invalid"""
    pass


class ReplayError(MintLedgerError):
    """Raised when an event log cannot be parsed"""
    pass
