"""
Configuration Loader - YAML Loading with Validation.

Loads pipeline configuration from YAML files, optionally overlaid with a
profile (config/profiles/<name>.yaml) and explicit overrides, and
validates the merged result with PipelineConfig.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from middleware_pipeline.config.models import PipelineConfig

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads and validates pipeline configuration."""

    def __init__(
        self,
        base_path: Optional[Path] = None,
        profiles_dir: Union[str, Path] = Path("config") / "profiles",
    ) -> None:
        """
        Initialize config loader.

        Args:
            base_path: Base path for relative config paths
            profiles_dir: Profile directory, relative to base_path
        """
        self._base_path = base_path or Path(".")
        self._profiles_dir = Path(profiles_dir)

    def load(
        self,
        config_path: Union[str, Path],
        profile: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> PipelineConfig:
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to YAML config file
            profile: Optional profile name merged over the file
            overrides: Optional values merged last

        Returns:
            Validated PipelineConfig

        Raises:
            FileNotFoundError: If the config file or profile doesn't exist
            ValueError: If a YAML document is not a mapping
            pydantic.ValidationError: If the merged config is invalid
        """
        config_dict = self._load_yaml(self._resolve(config_path))

        if profile:
            config_dict = merge_configs(config_dict, self._load_profile(profile))
        if overrides:
            config_dict = merge_configs(config_dict, overrides)

        config = PipelineConfig.model_validate(config_dict)
        logger.debug(
            f"Loaded config {config_path} (profile={profile or '-'}, "
            f"middlewares={config.middlewares.enabled})"
        )
        return config

    def load_from_dict(self, config_dict: Dict[str, Any]) -> PipelineConfig:
        """Validate configuration given as a dictionary."""
        return PipelineConfig.model_validate(config_dict)

    def _resolve(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self._base_path / p

    def _load_profile(self, profile: str) -> Dict[str, Any]:
        path = self._resolve(self._profiles_dir / f"{profile}.yaml")
        if not path.exists():
            raise FileNotFoundError(f"Profile not found: {profile}")
        return self._load_yaml(path)

    @staticmethod
    def _load_yaml(path: Path) -> Dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping: {path}")
        return data


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge ``overlay`` into a copy of ``base``."""
    result = dict(base)
    for key, value in overlay.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def load_config(
    config_path: Union[str, Path],
    profile: Optional[str] = None,
    base_path: Optional[Path] = None,
) -> PipelineConfig:
    """Convenience wrapper around ConfigLoader.load()."""
    return ConfigLoader(base_path=base_path).load(config_path, profile)
