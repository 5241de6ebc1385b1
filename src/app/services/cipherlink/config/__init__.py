"""
Cipherlink - Configuration Module

Provides loading of the bootstrap plan and the resolved ProtocolConfig model.

Usage:
    from .config import ConfigLoader, BootstrapPlan

    # Load the bundled bootstrap.json
    plan = ConfigLoader.from_default_file()

    # Or honour CIPHERLINK_BOOTSTRAP_FILE
    plan = ConfigLoader.from_settings(settings)

    # Override origins for a one-off probe
    plan = ConfigLoader.merge(plan, {"origins": ["https://m.example.com"]})
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..exceptions import ConfigError
from .plan import BootstrapPlan
from .protocol import REQUIRED_KEYS, ProtocolConfig

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loader for bootstrap plans.

    Usage:
        # From file
        plan = ConfigLoader.from_file("bootstrap.json")

        # From dict
        plan = ConfigLoader.from_dict({"origins": [...], "patterns": {...}})

        # Empty plan
        plan = ConfigLoader.default()
    """

    _cached_plan: BootstrapPlan | None = None

    @classmethod
    def from_file(cls, path: str | Path) -> BootstrapPlan:
        """Load a bootstrap plan from a JSON file.

        Args:
            path: Path to the JSON plan

        Returns:
            BootstrapPlan instance

        Raises:
            ConfigError: If the file is missing, not JSON, or fails validation
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Bootstrap plan not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in bootstrap plan: {e}") from e

        logger.info(f"Loaded bootstrap plan from {path}")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BootstrapPlan:
        """Load a bootstrap plan from a dictionary.

        Keys starting with ``_`` are comments and are dropped.
        """
        clean_data = {k: v for k, v in data.items() if not k.startswith("_")}

        try:
            plan = BootstrapPlan.model_validate(clean_data)
        except ValidationError as e:
            raise ConfigError(f"Bootstrap plan validation failed: {e}") from e

        logger.debug(f"Parsed bootstrap plan: {len(plan.origins)} origins, {len(plan.patterns)} patterns")
        return plan

    @classmethod
    def default(cls) -> BootstrapPlan:
        """Get an empty plan."""
        return BootstrapPlan()

    @classmethod
    def from_default_file(cls) -> BootstrapPlan:
        """Load the bootstrap.json bundled next to this module (cached)."""
        if cls._cached_plan is not None:
            return cls._cached_plan

        default_path = Path(__file__).parent / "bootstrap.json"

        if default_path.exists():
            cls._cached_plan = cls.from_file(default_path)
            return cls._cached_plan

        logger.warning(f"Default bootstrap plan not found at {default_path}, using empty plan")
        cls._cached_plan = cls.default()
        return cls._cached_plan

    @classmethod
    def from_settings(cls, settings: Any) -> BootstrapPlan:
        """Load the plan named by CIPHERLINK_BOOTSTRAP_FILE, or the bundled one."""
        path = getattr(settings, "CIPHERLINK_BOOTSTRAP_FILE", None)
        if path:
            return cls.from_file(path)
        return cls.from_default_file()

    @classmethod
    def merge(
        cls,
        base: BootstrapPlan,
        overrides: dict[str, Any],
    ) -> BootstrapPlan:
        """Merge override values into a base plan and return a new one."""
        base_dict = base.model_dump()
        cls._deep_merge(base_dict, overrides)
        return cls.from_dict(base_dict)

    @staticmethod
    def _deep_merge(base: dict, overrides: dict) -> None:
        """Recursively merge overrides into base dict (in-place)."""
        for key, value in overrides.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                ConfigLoader._deep_merge(base[key], value)
            else:
                base[key] = value

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the cached default plan."""
        cls._cached_plan = None


__all__ = [
    "BootstrapPlan",
    "ConfigLoader",
    "ProtocolConfig",
    "REQUIRED_KEYS",
]
