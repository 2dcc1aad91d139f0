"""JSON serialization for JSON Feed documents."""

from __future__ import annotations

import json
from typing import Any, Dict, TextIO


def to_json_string(document: Dict[str, Any], indent: int = 2) -> str:
    """Serialize with sorted keys so identical input gives identical output."""
    return json.dumps(
        document,
        indent=indent or None,
        sort_keys=True,
        ensure_ascii=False,
    )


def write_json(document: Dict[str, Any], sink: TextIO, indent: int = 2) -> None:
    """Write the serialized document followed by a newline."""
    sink.write(to_json_string(document, indent=indent))
    sink.write("\n")
