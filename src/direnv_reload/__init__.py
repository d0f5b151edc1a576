"""Force direnv to rebuild its cache for a project directory."""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
