"""Tests for setup_logging argument and environment validation."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from gemrepo_packager.core.logging import LOG_FORMATS, setup_logging
from gemrepo_packager.exceptions import ConfigurationError


class TestSetupLoggingValidation:
    def test_formats(self):
        assert LOG_FORMATS == ("console", "json")

    def test_unknown_level_argument(self):
        with pytest.raises(ConfigurationError, match=r"Unknown log level \[LOUD\]"):
            setup_logging("loud")

    def test_unknown_level_from_env(self):
        with patch.dict(os.environ, {"GEMREPO_LOG_LEVEL": "trace"}):
            with pytest.raises(ConfigurationError, match="GEMREPO_LOG_LEVEL"):
                setup_logging()

    def test_unknown_format_from_env(self):
        with patch.dict(os.environ, {"GEMREPO_LOG_FORMAT": "logfmt"}):
            with pytest.raises(ConfigurationError, match=r"Unknown log format \[logfmt\]"):
                setup_logging("INFO")

    def test_argument_overrides_env_format(self):
        with patch.dict(os.environ, {"GEMREPO_LOG_FORMAT": "logfmt"}):
            with pytest.raises(ConfigurationError, match=r"\[yaml\]"):
                setup_logging("INFO", log_format="yaml")
