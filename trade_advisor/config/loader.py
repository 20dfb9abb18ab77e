"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import SECTION_TYPES, DefaultConfig, get_default_config


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_symbol_config(self, symbol: str) -> dict[str, Any]:
        """Load symbol-specific configuration overrides."""
        symbols_file = self.config_dir / "symbols.yaml"

        if not symbols_file.exists():
            return {}

        with open(symbols_file) as f:
            symbols_config = yaml.safe_load(f) or {}

        return (symbols_config.get("symbols") or {}).get(symbol, {}) or {}  # type: ignore[no-any-return]

    def merge_config(
        self,
        symbol: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Per-request overrides (highest priority)
        2. Symbol-specific overrides
        3. Global defaults (lowest priority)
        """
        # Start with global defaults
        config = self._dataclass_to_dict(self.defaults)

        # Apply symbol-specific overrides
        symbol_config = self.load_symbol_config(symbol)
        config = self._deep_merge(config, symbol_config)

        # Apply per-request overrides
        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def build_config(
        self,
        symbol: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> DefaultConfig:
        """Merge all tiers and rebuild a typed configuration."""
        return config_from_dict(self.merge_config(symbol, overrides))

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                elif isinstance(value, dict):
                    result[field_name] = dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def config_from_dict(config: dict[str, Any]) -> DefaultConfig:
    """
    Rebuild a DefaultConfig from a (merged) dictionary.

    YAML lists are converted back to tuples. Unknown sections or keys raise
    ConfigurationError so that typos in override files do not pass silently.
    """
    unknown_sections = set(config) - set(SECTION_TYPES)
    if unknown_sections:
        raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown_sections)}")

    sections = {}
    for name, params_type in SECTION_TYPES.items():
        values = config.get(name, {}) or {}
        known = {f.name for f in fields(params_type)}
        unknown_keys = set(values) - known
        if unknown_keys:
            raise ConfigurationError(
                f"Unknown keys in '{name}' configuration: {sorted(unknown_keys)}"
            )
        kwargs = {
            key: tuple(value) if isinstance(value, list) else value
            for key, value in values.items()
        }
        sections[name] = params_type(**kwargs)

    return DefaultConfig(**sections)
