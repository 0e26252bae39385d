"""Plugin system — pluggy hook surface for observing form activity.

Hookspecs live in :mod:`formgate.plugins.hookspecs`; plugins decorate their
implementations with :data:`hookimpl`.
"""

from __future__ import annotations

import pluggy

hookimpl = pluggy.HookimplMarker("formgate")

__all__ = ["hookimpl"]
