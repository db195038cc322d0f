r"""Unit tests for the public package interface."""

from __future__ import annotations

import arebound


def test_version() -> None:
    assert isinstance(arebound.__version__, str)


def test_all_exports_exist() -> None:
    for name in arebound.__all__:
        assert hasattr(arebound, name), name


def test_error_hierarchy() -> None:
    for error in (
        arebound.TerminalRequestError,
        arebound.ExhaustedRetriesError,
        arebound.ResponseDecodeError,
        arebound.RequestCancelledError,
    ):
        assert issubclass(error, arebound.ResilientRequestError)
