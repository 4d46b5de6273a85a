"""Typed configuration dataclasses for pair-matchmaker.

Provides strongly-typed configuration objects that can be used throughout
the application for better type safety and IDE support.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Dict, Any


@dataclass
class MatchingConfig:
    """Pairing rule configuration (aligned with _DEFAULTS)."""
    skill_tolerance: float = 10  # max |skill_a - skill_b| for a same-region match
    long_wait_threshold: float = 30.0  # seconds
    both_must_wait_long: bool = True  # False = either player waiting long is enough

    def validate(self) -> None:
        """Raise ValueError on values the pairing rules cannot use."""
        if self.skill_tolerance < 0:
            raise ValueError(f"skill_tolerance must be >= 0 (got {self.skill_tolerance})")
        if self.long_wait_threshold < 0:
            raise ValueError(f"long_wait_threshold must be >= 0 (got {self.long_wait_threshold})")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for backward compatibility."""
        return asdict(self)


@dataclass
class DriverConfig:
    """Matchmaking loop configuration."""
    retry_delay: float = 1.0  # seconds to wait for an arrival before re-scanning
    continue_as_new_after: int = 1000  # loop iterations before snapshot + restart
    simulation_tick: float = 1.0  # simulated seconds per tick in `mmp simulate`

    def validate(self) -> None:
        """Raise ValueError on values the driver loop cannot use."""
        if self.retry_delay <= 0:
            raise ValueError(f"retry_delay must be > 0 (got {self.retry_delay})")
        if self.continue_as_new_after < 0:
            raise ValueError(f"continue_as_new_after must be >= 0 (got {self.continue_as_new_after})")
        if self.simulation_tick <= 0:
            raise ValueError(f"simulation_tick must be > 0 (got {self.simulation_tick})")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for backward compatibility."""
        return asdict(self)


# Env coercion turns "1"/"0" into booleans; numeric fields are cast back
_MATCHING_NUMBERS = {"skill_tolerance": float, "long_wait_threshold": float}
_DRIVER_NUMBERS = {"retry_delay": float, "continue_as_new_after": int, "simulation_tick": float}


def _coerce(section: Dict[str, Any], casts: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(section)
    for key, cast in casts.items():
        if key in result:
            result[key] = cast(result[key])
    return result


@dataclass
class AppConfig:
    """Root application configuration with all subsections."""
    log_level: str = "INFO"
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    driver: DriverConfig = field(default_factory=DriverConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to nested dictionary for backward compatibility.

        Returns:
            Nested dict structure matching config format
        """
        return {
            "log_level": self.log_level,
            "matching": self.matching.to_dict(),
            "driver": self.driver.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        """Create typed config from dictionary.

        Args:
            data: Dictionary config (from load_config)

        Returns:
            Typed AppConfig instance
        """
        return cls(
            log_level=data.get("log_level", "INFO"),
            matching=MatchingConfig(**_coerce(data.get("matching", {}), _MATCHING_NUMBERS)),
            driver=DriverConfig(**_coerce(data.get("driver", {}), _DRIVER_NUMBERS)),
        )


__all__ = [
    "AppConfig",
    "MatchingConfig",
    "DriverConfig",
]
