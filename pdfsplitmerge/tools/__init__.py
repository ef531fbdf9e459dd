"""Namespace for pluggable pdfsplitmerge tools."""

from __future__ import annotations

from .common.pipeline import registry


def load_builtin_plugins() -> None:
    from .splitter import split  # noqa: F401  # registers pages and extract
    from .merger import merge  # noqa: F401
    from .workspace import files  # noqa: F401


__all__ = ["registry", "load_builtin_plugins"]
