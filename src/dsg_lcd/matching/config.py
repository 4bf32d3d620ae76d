"""Configuration for descriptor candidate search."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .scoring import DescriptorScoreType


@dataclass(frozen=True)
class DescriptorMatchConfig:
    """Thresholds for one layer of descriptor search.

    Attributes:
        type: Scoring scheme
        min_time_separation_s: Minimum age of a candidate relative to the query
        min_score: Score a candidate must exceed to stay a valid match
        min_registration_score: Score a candidate must reach to be registered
        min_score_ratio: Fraction of the best score a candidate must exceed
        min_match_separation_m: Minimum distance between registered candidates
        max_registration_matches: Maximum number of registered candidates
    """

    type: DescriptorScoreType = DescriptorScoreType.L1
    min_time_separation_s: float = 0.0
    min_score: float = 0.0
    min_registration_score: float = 0.0
    min_score_ratio: float = 0.0
    min_match_separation_m: float = 0.0
    max_registration_matches: int = 5

    def __post_init__(self) -> None:
        """Validate thresholds."""
        # frozen, so coerce through object.__setattr__
        object.__setattr__(self, "type", DescriptorScoreType.parse(self.type))

        for name in ("min_score", "min_registration_score", "min_score_ratio"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")

        for name in ("min_time_separation_s", "min_match_separation_m"):
            value = getattr(self, name)
            if value < 0.0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        if self.max_registration_matches < 0:
            raise ValueError(
                f"max_registration_matches must be non-negative, "
                f"got {self.max_registration_matches}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DescriptorMatchConfig:
        """Create config from a mapping of field names to values.

        Args:
            data: Field values; missing fields keep their defaults

        Returns:
            Validated config

        Raises:
            ValueError: If the mapping contains unknown fields
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown descriptor match config fields: {', '.join(unknown)}")

        return cls(**dict(data))

    @classmethod
    def from_yaml(cls, path: str | Path, section: str | None = None) -> DescriptorMatchConfig:
        """Load config from a YAML file.

        Args:
            path: Path to YAML file
            section: Optional top-level key holding the config (e.g. "root")

        Returns:
            Validated config

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f)

        if section is not None:
            if not isinstance(data, dict) or section not in data:
                raise ValueError(f"Section '{section}' not found in {path}")
            data = data[section]

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid descriptor match config in {path}")

        return cls.from_dict(data)
