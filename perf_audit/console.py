"""
Console reporting shared by the perf-audit tools.

Progress lines go to stderr so stdout stays reserved for the report/JSON.
"""

from __future__ import annotations

import sys


_PREFIXES = {
    "info": "ℹ️",
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "debug": "🔍",
}


class Console:
    def __init__(self, debug: bool = False):
        self.debug = debug

    def log(self, message: str, level: str = "info") -> None:
        """Log message with optional debug output."""
        if level == "debug" and not self.debug:
            return
        prefix = _PREFIXES.get(level, _PREFIXES["info"])
        print(f"{prefix} {message}", file=sys.stderr)
