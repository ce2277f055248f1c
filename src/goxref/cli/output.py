"""JSON rendering of cross-references and checker errors."""

import json
from collections.abc import Iterable, Iterator
from typing import Any

from goxref.check.checker import CheckError
from goxref.xref.models import CrossReference


def check_error_dict(err: CheckError) -> dict[str, Any]:
    return {
        "pos": err.pos.to_dict() if err.pos is not None else None,
        "message": err.msg,
    }


def xref_lines(records: Iterable[CrossReference]) -> Iterator[str]:
    """One compact JSON object per record."""
    for xref in records:
        yield json.dumps(xref.to_dict(), separators=(",", ":"))


def xrefs_document(
    records: Iterable[CrossReference],
    errors: Iterable[CheckError] = (),
    indent: int | None = None,
) -> str:
    """A single JSON document holding every record and checker error."""
    return json.dumps(
        {
            "xrefs": [xref.to_dict() for xref in records],
            "errors": [check_error_dict(e) for e in errors],
        },
        indent=indent,
    )
