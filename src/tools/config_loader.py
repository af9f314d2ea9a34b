"""
Configuration loader for indicator profiles and environment variables.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from src.scales.registry import IndicatorRegistry, registry_from_dict


logger = logging.getLogger(__name__)


DEFAULT_PROFILE = "indicators"
PROFILE_ENV_VAR = "WORLD_METRICS_PROFILE"


class ConfigLoader:
    """Load and manage configuration from YAML files and environment."""

    CONFIG_DIR = Path(__file__).parent.parent.parent / "configs"

    @classmethod
    def available_profiles(cls) -> list:
        return sorted(f.stem for f in cls.CONFIG_DIR.glob("*.yaml"))

    @classmethod
    def load_profile(cls, profile_name: str = DEFAULT_PROFILE) -> Dict[str, Any]:
        """
        Load an indicator profile.

        Args:
            profile_name: Name of the profile (file stem under configs/)

        Returns:
            Dictionary with configuration values

        Raises:
            FileNotFoundError: If profile doesn't exist
        """
        profile_path = cls.CONFIG_DIR / f"{profile_name}.yaml"

        if not profile_path.exists():
            raise FileNotFoundError(
                f"Profile '{profile_name}' not found. "
                f"Available profiles: {', '.join(cls.available_profiles())}"
            )

        with open(profile_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded profile '%s' from %s", profile_name, profile_path)
        return data

    @classmethod
    def get_profile_from_env(cls) -> Optional[str]:
        """Get profile name from WORLD_METRICS_PROFILE environment variable."""
        return os.getenv(PROFILE_ENV_VAR)

    @classmethod
    def load_default_or_env_profile(cls) -> Dict[str, Any]:
        """
        Load the profile named by the environment variable or the default one.

        Returns:
            Configuration dictionary
        """
        profile = cls.get_profile_from_env() or DEFAULT_PROFILE
        return cls.load_profile(profile)


def get_config() -> Dict[str, Any]:
    """Convenience function to get current configuration."""
    return ConfigLoader.load_default_or_env_profile()


def get_indicator_registry(profile_name: Optional[str] = None) -> IndicatorRegistry:
    """
    Build the indicator registry of ``profile_name``.

    Falls back to WORLD_METRICS_PROFILE, then to the default profile.
    """
    if profile_name is None:
        data = get_config()
    else:
        data = ConfigLoader.load_profile(profile_name)
    return registry_from_dict(data)
