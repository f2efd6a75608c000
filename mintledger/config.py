"""
Ledger configuration.

Loaded from YAML:

    price: 1
    combined_name: "Combined Asset"
    combined_description: "Created by combining two asset records"
    event_log: ".mintledger/events.jsonl"
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from mintledger.core.exceptions import ConfigError
from mintledger.core.models import PRICE


DEFAULT_COMBINED_NAME        = "Combined Asset"
DEFAULT_COMBINED_DESCRIPTION = "Created by combining two asset records"


@dataclass
class LedgerConfig:
    """Settings for an AssetLedger."""

    price:                int           = PRICE
    combined_name:        str           = DEFAULT_COMBINED_NAME
    combined_description: str           = DEFAULT_COMBINED_DESCRIPTION
    event_log:            Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.price, int) or isinstance(self.price, bool) or self.price < 1:
            raise ConfigError("price must be a positive integer", {"price": self.price})
        for key in ("combined_name", "combined_description"):
            if not isinstance(getattr(self, key), str):
                raise ConfigError(f"{key} must be a string", {key: getattr(self, key)})
        if self.event_log is not None and not isinstance(self.event_log, str):
            raise ConfigError("event_log must be a path string", {"event_log": self.event_log})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerConfig":
        known   = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError("Unknown configuration keys", {"keys": unknown})
        return cls(**data)

    @classmethod
    def from_yaml(cls, config_file: Path) -> "LedgerConfig":
        """Load configuration from a YAML file. An empty file gives the defaults."""
        config_file = Path(config_file)
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as exc:
            raise ConfigError(f"Config file not found: {config_file}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_file}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file {config_file} must contain a mapping",
                {"got": type(data).__name__},
            )
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
