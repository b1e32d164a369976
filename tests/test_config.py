"""Tests for waypost.config — AppConfig defaults and immutability."""

import dataclasses

import pytest

from waypost.config import AppConfig


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.debug is False
        assert config.log_level == "warning"
        assert config.method_override is False
        assert config.request_timeout == 30.0

    def test_override(self) -> None:
        config = AppConfig(debug=True, request_timeout=None)
        assert config.debug is True
        assert config.request_timeout is None

    def test_frozen(self) -> None:
        config = AppConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.debug = True  # type: ignore[misc]
