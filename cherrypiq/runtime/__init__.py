"""Interactive runtime: transition table, controller, terminal, and loop.

Entry points are imported lazily because the loop depends on input and
render modules that themselves import ``runtime.transitions``.
"""

from __future__ import annotations


def run_picker(*args, **kwargs):
    """Lazily import the session entrypoint to avoid heavy bootstrap on import."""
    from .app import run_picker as _run_picker

    return _run_picker(*args, **kwargs)


def run_main_loop(*args, **kwargs):
    """Lazily import loop runner to avoid package-import cycles."""
    from .loop import run_main_loop as _run_main_loop

    return _run_main_loop(*args, **kwargs)


__all__ = ["run_picker", "run_main_loop"]
