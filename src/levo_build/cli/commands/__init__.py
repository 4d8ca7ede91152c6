"""CLI command modules.

Each sub-command lives in its own module and is loaded lazily by
:class:`levo_build.cli.main.LazyGroup`.
"""

from __future__ import annotations

__all__: list[str] = []
