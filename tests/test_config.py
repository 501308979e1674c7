import logging

import pytest
from pydantic import ValidationError

from strata import StackConfig, StrataSettings, configure_logging, get_settings


class TestStrataSettings:
    def test_defaults(self):
        settings = StrataSettings()
        assert settings.CLOSE_ABANDONED is True
        assert settings.RESUSPEND_POLICY == "close"
        assert settings.LOG_LEVEL == "WARNING"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("STRATA_CLOSE_ABANDONED", "0")
        monkeypatch.setenv("STRATA_RESUSPEND_POLICY", "error")
        settings = StrataSettings()
        assert settings.CLOSE_ABANDONED is False
        assert settings.RESUSPEND_POLICY == "error"

    def test_invalid_policy_rejected(self, monkeypatch):
        monkeypatch.setenv("STRATA_RESUSPEND_POLICY", "retry")
        with pytest.raises(ValidationError):
            StrataSettings()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestStackConfig:
    def test_from_settings(self):
        settings = StrataSettings(CLOSE_ABANDONED=False, RESUSPEND_POLICY="error")
        config = StackConfig.from_settings(settings)
        assert config == StackConfig(close_abandoned=False, resuspend_policy="error")

    def test_frozen_and_strict(self):
        config = StackConfig()
        with pytest.raises(ValidationError):
            config.close_abandoned = False
        with pytest.raises(ValidationError):
            StackConfig(timeout=1)


class TestConfigureLogging:
    def test_installs_single_handler(self):
        logger = logging.getLogger("strata")
        before = list(logger.handlers)
        try:
            configure_logging("DEBUG")
            configure_logging("DEBUG")
            added = [h for h in logger.handlers if h not in before]
            assert len(added) == 1
            assert logger.level == logging.DEBUG
        finally:
            for handler in logger.handlers[:]:
                if handler not in before:
                    logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

    def test_level_defaults_to_settings(self, monkeypatch):
        monkeypatch.setenv("STRATA_LOG_LEVEL", "info")
        logger = logging.getLogger("strata")
        before = list(logger.handlers)
        try:
            configure_logging()
            assert logger.level == logging.INFO
        finally:
            for handler in logger.handlers[:]:
                if handler not in before:
                    logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)
