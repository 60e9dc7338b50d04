"""
Test suite for configuration loading.
"""

import pytest
from pydantic import ValidationError

from odata_batch.config import BatchConfig, get_config, set_config


class TestBatchConfig:
    """Tests for BatchConfig settings."""

    def test_defaults(self):
        """Test default values."""
        config = BatchConfig()

        assert config.max_nesting_depth == 8
        assert config.strict_content_types is False
        assert config.boundary_prefix == "batch_"
        assert config.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        """Test ODATA_BATCH_ prefixed environment variables."""
        monkeypatch.setenv("ODATA_BATCH_MAX_NESTING_DEPTH", "2")
        monkeypatch.setenv("ODATA_BATCH_STRICT_CONTENT_TYPES", "true")

        config = BatchConfig()

        assert config.max_nesting_depth == 2
        assert config.strict_content_types is True

    def test_depth_must_be_positive(self):
        """Test field validation."""
        with pytest.raises(ValidationError):
            BatchConfig(max_nesting_depth=0)

    def test_global_instance(self):
        """Test get_config/set_config."""
        custom = BatchConfig(boundary_prefix="b_")
        set_config(custom)

        assert get_config() is custom

        set_config(None)
        assert get_config() is not custom
