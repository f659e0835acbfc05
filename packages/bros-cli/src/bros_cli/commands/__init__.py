"""CLI command modules.

Each module is loaded lazily by ``bros_cli.main.LazyGroup``.
"""

from __future__ import annotations

__all__: list[str] = []
