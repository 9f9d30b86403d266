"""Configuration defaults with per-run overrides."""

from typing import Any


class ConfigMeta:
    """Schema definition - separate from runtime state."""

    SETTINGS: dict[str, str] = {
        "title": "Banner printed above the list",
        "poll_interval_ms": "Key poll timeout in milliseconds (default: 50)",
        "selected_color": "Rich color for selected labels",
        "default_items": "Comma-separated labels used when none are given",
    }


class Config:
    """Runtime configuration: defaults overridden by explicit values."""

    DEFAULTS: dict[str, Any] = {
        "title": "Welcome to the Selectable List Example!",
        "poll_interval_ms": 50,
        "selected_color": "green",
        "default_items": "Item 1,Item 2,Item 3,Item 4",
    }

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    @classmethod
    def load(cls, **overrides: Any) -> "Config":
        """Factory method - defaults plus any non-None overrides."""
        config = cls()
        for key, value in overrides.items():
            if value is None:
                continue
            config.set(key, value)
        return config

    def __getattr__(self, name: str) -> Any:
        """Access config values as attributes."""
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._data:
            return self._data[name]
        if name in self.DEFAULTS:
            return self.DEFAULTS[name]
        raise AttributeError(f"Config has no attribute '{name}'")

    def set(self, key: str, value: Any) -> None:
        if key not in self.DEFAULTS:
            raise ValueError(f"Unknown config key: {key}")
        self._data[key] = self._coerce(value, type(self.DEFAULTS[key]))

    @property
    def default_labels(self) -> list[str]:
        """Labels from the comma-separated default_items setting."""
        return [label.strip() for label in self.default_items.split(",") if label.strip()]

    @property
    def poll_interval(self) -> float:
        """Poll timeout in seconds."""
        return self.poll_interval_ms / 1000

    @staticmethod
    def _coerce(value: Any, target_type: type) -> Any:
        """Coerce a value to the type of its default."""
        if target_type is int:
            value = int(value)
            if value < 1:
                raise ValueError(f"Expected a positive integer, got {value}")
            return value
        return str(value)
