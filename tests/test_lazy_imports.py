"""Tests for the lazy top-level API of the crooner package."""

import pytest

import crooner


class TestLazyImports:
    @pytest.mark.parametrize("name", crooner.__all__)
    def test_every_exported_name_resolves(self, name: str) -> None:
        assert getattr(crooner, name) is not None

    def test_app_is_the_class(self) -> None:
        from crooner.app import App

        assert crooner.App is App

    def test_unknown_name_raises(self) -> None:
        with pytest.raises(AttributeError, match="has no attribute"):
            crooner.DoesNotExist  # noqa: B018

    def test_version(self) -> None:
        assert crooner.__version__ == "0.9.0"
