"""Export Bear notes into a directory of Markdown files."""

from __future__ import annotations

__version__ = "0.1.0"
