"""Tests for the lazy top-level API in waypost/__init__.py."""

import pytest

import waypost


class TestLazyImports:
    @pytest.mark.parametrize("name", waypost.__all__)
    def test_every_export_resolves(self, name: str) -> None:
        assert getattr(waypost, name) is not None

    def test_router_is_routing_router(self) -> None:
        from waypost.routing.router import Router

        assert waypost.Router is Router

    def test_unknown_attribute(self) -> None:
        with pytest.raises(AttributeError):
            waypost.DoesNotExist  # noqa: B018

    def test_version(self) -> None:
        assert isinstance(waypost.__version__, str)
