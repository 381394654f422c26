"""Interactive runtime: background loading, navigation, key dispatch, loop.

Entry points are imported lazily; ``lazyfm.render`` depends on
``runtime.navigation`` while ``runtime.loop`` depends on ``lazyfm.render``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .loop import RuntimeLoopTiming


def run_browser(*args, **kwargs):
    """Lazily import the session bootstrap."""
    from .app import run_browser as _run_browser

    return _run_browser(*args, **kwargs)


def run_main_loop(*args, **kwargs):
    """Lazily import loop runner to avoid package-import cycles."""
    from .loop import run_main_loop as _run_main_loop

    return _run_main_loop(*args, **kwargs)


def __getattr__(name: str):
    if name == "RuntimeLoopTiming":
        from .loop import RuntimeLoopTiming

        return RuntimeLoopTiming
    raise AttributeError(name)


__all__ = ["RuntimeLoopTiming", "run_browser", "run_main_loop"]
