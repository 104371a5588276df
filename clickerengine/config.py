from __future__ import annotations

from dataclasses import dataclass


@dataclass
class EngineConfig:
    """Cadences and keys for a game session."""

    name: str = "Cookie Clicker"
    tick_interval: float = 1.0
    autosave_interval: float = 3.0
    boost_poll_interval: float = 10.0
    cache_key_prefix: str = "cookiePlayerData_"

    def validate(self) -> list[str]:
        """Check for configuration errors. Returns list of error messages."""
        errors: list[str] = []
        for field_name in ("tick_interval", "autosave_interval", "boost_poll_interval"):
            value = getattr(self, field_name)
            if value <= 0:
                errors.append(f"{field_name} must be positive, got {value!r}")
        if not self.cache_key_prefix:
            errors.append("cache_key_prefix must not be empty")
        return errors

    def cache_key(self, player_id: str) -> str:
        return f"{self.cache_key_prefix}{player_id}"
