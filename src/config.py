"""Geometry settings for the family tree layout."""

import math
from dataclasses import dataclass, fields
from typing import Any

TRUE_STRINGS = {"true", "1", "yes", "on"}
FALSE_STRINGS = {"false", "0", "no", "off"}


def _to_float(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return number


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in TRUE_STRINGS | FALSE_STRINGS:
        return value.strip().lower() in TRUE_STRINGS
    raise ValueError(f"{name} must be true or false, got {value!r}")


@dataclass(frozen=True)
class LayoutConfig:
    # Person card
    node_width: float = 188
    node_height: float = 236

    # Spacing
    spouse_gap: float = 44
    unit_gap: float = 188
    row_gap: float = 180
    top_padding: float = 120
    side_padding: float = 180
    seed_spacing: float = 220  # seed center spacing for people without a prior x

    # Lane allocation for horizontal connector segments
    lane_step: float = 20
    lane_gap: float = 22
    lane_range_padding: float = 18

    # Canvas floor
    min_width: float = 1200
    min_height: float = 760

    # Re-center every generation row on the widest one
    center_rows: bool = True

    @property
    def pair_width(self) -> float:
        return self.node_width * 2 + self.spouse_gap

    @property
    def row_height(self) -> float:
        return self.node_height + self.row_gap

    @classmethod
    def from_mapping(cls, values: dict[str, Any] | None) -> "LayoutConfig":
        """
        Build a config from a plain mapping (e.g. the "config" object of a JSON input).

        Values are converted to the field types (numbers for geometry, a real bool
        for center_rows), so "120" and "false" behave as expected. Unknown keys are
        ignored so that input files can carry extra settings.

        Raises:
            ValueError: If a value cannot be converted
        """
        if not values:
            return cls()
        converted = {}
        for f in fields(cls):
            if f.name not in values:
                continue
            convert = _to_bool if isinstance(f.default, bool) else _to_float
            converted[f.name] = convert(f.name, values[f.name])
        return cls(**converted)


DEFAULT_CONFIG = LayoutConfig()
