import logging

import pytest
import structlog
from pydantic import ValidationError

from config import Settings
from utils.log_config import configure_logging


class TestSettings:
    def test_defaults(self):
        """Defaults blur by 200 m and log JSON"""
        s = Settings()
        assert s.blur_radius_meters == 200.0
        assert s.high_priority_limit == 10
        assert s.log_format == "json"
        assert s.geocoding_enabled is True

    def test_from_env(self):
        """RELIEF_ variables override defaults and others are ignored"""
        s = Settings.from_env({
            "RELIEF_DEBUG": "yes",
            "RELIEF_LOG_LEVEL": "debug",
            "RELIEF_BLUR_RADIUS_METERS": "350",
            "RELIEF_GEOCODING_ENABLED": "false",
            "UNRELATED": "ignored",
        })
        assert s.debug is True
        assert s.log_level == "DEBUG"
        assert s.blur_radius_meters == 350.0
        assert s.geocoding_enabled is False

    def test_invalid_log_format(self):
        """Only json and console log formats are accepted"""
        with pytest.raises(ValidationError):
            Settings(log_format="xml")

    def test_negative_blur_radius(self):
        """Blur radius cannot be negative"""
        with pytest.raises(ValidationError):
            Settings(blur_radius_meters=-1)


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_logging(self):
        root = logging.getLogger()
        level, handlers = root.level, list(root.handlers)
        yield
        structlog.reset_defaults()
        root.handlers = handlers
        root.setLevel(level)

    def test_sets_root_level(self):
        """Configured level is applied to the root logger"""
        configure_logging(Settings(log_level="DEBUG", log_format="console"))
        assert logging.getLogger().level == logging.DEBUG

    def test_json_renderer_by_default(self):
        """JSON rendering is the default output"""
        configure_logging(Settings(log_level="WARNING"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert logging.getLogger().level == logging.WARNING
