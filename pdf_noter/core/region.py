from numbers import Real
from typing import Any, List

from pdf_noter.core import sexp
from pdf_noter.core.errors import MalformedRecord, SexpSyntaxError
from pdf_noter.core.types import RegionDescriptor


# Position of the `(page (coords...))` payload inside the tagged record.
REGION_FIELD = 2


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def decode_region(raw: str) -> RegionDescriptor:
    """Decode one serialized highlight record into a region descriptor.

    The record is a tagged list such as `(tag 1 (2 (0.1 0.2 0.3 0.4)))`;
    field 2 carries the page and a flat list of quad coordinates.
    Raises MalformedRecord for anything that does not have that shape.
    """
    try:
        record = sexp.loads(raw)
    except SexpSyntaxError as e:
        raise MalformedRecord(f"Highlight record does not parse: {e}") from e

    if not isinstance(record, list):
        raise MalformedRecord(f"Highlight record is not a list: {raw!r}")
    if len(record) <= REGION_FIELD:
        raise MalformedRecord(
            f"Highlight record has {len(record)} field(s), expected at least {REGION_FIELD + 1}"
        )

    payload = record[REGION_FIELD]
    if not isinstance(payload, list) or len(payload) != 2:
        raise MalformedRecord(f"Region field is not (page (coordinates...)): {sexp.dumps(payload)}")

    page, coords = payload
    if not isinstance(page, int) or isinstance(page, bool) or page < 1:
        raise MalformedRecord(f"Invalid page in highlight record: {sexp.dumps(page)}")
    if not isinstance(coords, list) or not all(_is_number(c) for c in coords):
        raise MalformedRecord(f"Region coordinates are not a list of numbers: {sexp.dumps(coords)}")
    if len(coords) % 4:
        raise MalformedRecord(f"Coordinate count {len(coords)} is not a multiple of 4")

    return {"page": page, "coordinates": [float(c) for c in coords]}


def encode_region(region: RegionDescriptor, tag: str = "pdf-highlight", version: int = 1) -> str:
    """Print a region back into the tagged record shape `decode_region` reads."""
    coords: List[float] = [float(c) for c in region["coordinates"]]
    return sexp.dumps([sexp.Symbol(tag), version, [int(region["page"]), coords]])


def iter_quads(region: RegionDescriptor) -> List[List[float]]:
    c = region["coordinates"]
    return [list(c[i:i + 4]) for i in range(0, len(c), 4)]
