"""
One-way JSON rendering of a report.

`from_json` always raises TypeError: a report cannot be turned back into INF
declarations.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from .report import Manufacturer


def report_to_json(report: Iterable[Manufacturer]) -> list[dict[str, Any]]:
    return [manufacturer.to_json() for manufacturer in report]


def render_report(report: Iterable[Manufacturer], *, indent: int = 2, ensure_ascii: bool = False) -> str:
    # Stable formatting:
    # - preserve insertion order (sort_keys=False)
    # - trailing newline
    return json.dumps(report_to_json(report), indent=indent, ensure_ascii=ensure_ascii, sort_keys=False) + "\n"


def from_json(data: Any) -> list[Manufacturer]:
    raise TypeError("inf-to-json reports are export-only; there is no JSON -> report conversion")
