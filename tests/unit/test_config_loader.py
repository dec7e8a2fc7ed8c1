"""
Unit Tests for configuration models and loading.

Test Aspects Covered:
    ✅ Business Logic: YAML loading, profile merge, overrides
    ✅ Validation: Pydantic rejects invalid values
    ✅ Edge Cases: Empty file, missing profile, non-mapping root
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from middleware_pipeline.config.loader import ConfigLoader, load_config, merge_configs
from middleware_pipeline.config.models import PipelineConfig, RetryConfig


class TestModels:
    """Test cases for Pydantic models."""

    def test_defaults(self, default_config) -> None:
        assert default_config.retry.max_attempts == 3
        assert default_config.timeout.enabled is False
        assert default_config.interception.logging.start_level == "DEBUG"
        assert default_config.middlewares.enabled == []

    def test_invalid_retry_rejected(self) -> None:
        """
        SCENARIO: max_attempts of zero
        EXPECTED: ValidationError
        """
        with pytest.raises(ValidationError):
            RetryConfig(max_attempts=0)


class TestConfigLoader:
    """Test cases for ConfigLoader."""

    def test_load_sample_file(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Load the sample YAML
        EXPECTED: Values from the file, defaults elsewhere
        """
        config = ConfigLoader().load(sample_config_path)

        assert config.retry.max_attempts == 4
        assert config.circuit_breaker.failure_threshold == 3
        assert config.circuit_breaker.success_threshold == 2
        assert config.interception.exclude_methods == ["reset"]
        assert config.interception.logging.done_level == "DEBUG"
        assert config.middlewares.enabled == ["timing", "retry"]

    def test_profile_merged_over_file(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Load with the strict profile
        EXPECTED: Profile values win, untouched keys kept
        """
        loader = ConfigLoader(base_path=sample_config_path.parent, profiles_dir="profiles")

        config = loader.load(sample_config_path, profile="strict")

        assert config.retry.max_attempts == 1
        assert config.retry.base_delay_seconds == 0.0
        assert config.interception.wrap_faults is True
        assert config.interception.display_name == "orders"
        assert config.middlewares.enabled == ["timing"]

    def test_overrides_applied_last(self, sample_config_path: Path) -> None:
        config = ConfigLoader().load(
            sample_config_path, overrides={"retry": {"max_attempts": 9}}
        )

        assert config.retry.max_attempts == 9

    def test_missing_profile(self, sample_config_path: Path) -> None:
        loader = ConfigLoader(base_path=sample_config_path.parent, profiles_dir="profiles")

        with pytest.raises(FileNotFoundError, match="Profile not found: ghost"):
            loader.load(sample_config_path, profile="ghost")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ConfigLoader(base_path=tmp_path).load("absent.yaml")

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert ConfigLoader().load(path) == PipelineConfig()

    def test_non_mapping_root_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must be a mapping"):
            ConfigLoader().load(path)

    def test_invalid_value_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("timeout:\n  seconds: -1\n")

        with pytest.raises(ValidationError):
            load_config(path)

    def test_load_from_dict(self) -> None:
        config = ConfigLoader().load_from_dict({"middlewares": {"enabled": ["a"]}})

        assert config.middlewares.enabled == ["a"]


class TestMergeConfigs:
    """Test cases for deep merge."""

    def test_nested_merge_does_not_mutate_base(self) -> None:
        base = {"retry": {"max_attempts": 3, "base_delay_seconds": 1.0}}
        overlay = {"retry": {"max_attempts": 5}, "version": "2"}

        merged = merge_configs(base, overlay)

        assert merged == {
            "retry": {"max_attempts": 5, "base_delay_seconds": 1.0},
            "version": "2",
        }
        assert base["retry"]["max_attempts"] == 3
