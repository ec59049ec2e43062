"""
Decoder configuration.

Defaults are the Apple II monitor cassette timings: a 2 kHz "0" tone and a
1 kHz "1" tone, preceded by a 770 Hz leader. Half-cycles are bucketed with two
fixed thresholds that sit between those tones.

A JSON file with any subset of the DecoderConfig field names can override the
defaults:

    {"short_threshold_us": 350, "long_threshold_us": 600, "min_header_count": 50}
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, fields
from typing import Optional

from wavrider.errors import ConfigError


# ---------------------------------------------------------------------------
# Tunable constants
# ---------------------------------------------------------------------------

SHORT_THRESHOLD_US = 350.0   # below this a half-cycle is SHORT (2 kHz "0" tone)
LONG_THRESHOLD_US  = 600.0   # at/above this a half-cycle is LONG (leader tone)
MIN_HEADER_COUNT   = 50      # leader half-cycles required before a sync is accepted


@dataclass
class DecoderConfig:
    short_threshold_us: float = SHORT_THRESHOLD_US
    long_threshold_us:  float = LONG_THRESHOLD_US
    min_header_count:   int   = MIN_HEADER_COUNT

    def __post_init__(self):
        self.short_threshold_us = float(self.short_threshold_us)
        self.long_threshold_us  = float(self.long_threshold_us)
        self.min_header_count   = int(self.min_header_count)
        self.validate()

    @property
    def short_threshold_s(self) -> float:
        return self.short_threshold_us / 1e6

    @property
    def long_threshold_s(self) -> float:
        return self.long_threshold_us / 1e6

    def validate(self) -> None:
        for name in ("short_threshold_us", "long_threshold_us"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigError(f"{name} must be a finite number, got {getattr(self, name)}")
        if self.short_threshold_us <= 0:
            raise ConfigError(f"short_threshold_us must be positive, got {self.short_threshold_us}")
        if self.long_threshold_us <= self.short_threshold_us:
            raise ConfigError(
                f"long_threshold_us ({self.long_threshold_us}) must be above "
                f"short_threshold_us ({self.short_threshold_us})"
            )
        if self.min_header_count < 0:
            raise ConfigError(f"min_header_count must be >= 0, got {self.min_header_count}")

    def replace(self, **overrides) -> "DecoderConfig":
        """Copy with the non-None overrides applied (CLI flags win over the file)."""
        values = asdict(self)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return DecoderConfig(**values)

    @classmethod
    def from_dict(cls, data: dict) -> "DecoderConfig":
        if not isinstance(data, dict):
            raise ConfigError(f"config must be a JSON object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        try:
            return cls(**{k: v for k, v in data.items() if k in known})
        except (TypeError, ValueError, OverflowError) as e:
            raise ConfigError(f"invalid config value: {e}") from e

    @classmethod
    def from_json(cls, path: str) -> "DecoderConfig":
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigError(f"could not read config {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"config {path} is not valid JSON: {e}") from e
        return cls.from_dict(data)


def load_config(path: Optional[str] = None) -> DecoderConfig:
    """Defaults when path is None, otherwise the file's values over the defaults."""
    if path is None:
        return DecoderConfig()
    return DecoderConfig.from_json(path)
