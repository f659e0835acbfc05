"""bros-cli: command line for compiling, validating, generating and running bros workspaces."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
