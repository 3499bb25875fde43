"""
Directory aggregation: filter -> group by QR id -> sort -> color.

Everything here is pure; inputs are never mutated and the same entries (in
any order) always produce the same groups.

Group ordering:
- numeric QR ids ascending
- non-numeric QR ids after them, in string order
- entries without a QR id last, in one "ungrouped" group
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Sequence

from qrbook.core.config import PALETTE_SIZE

from .schemas import Entry, EntryGroup, QrId

UNGROUPED_LABEL = "ungrouped"

_INT_RE = re.compile(r"[+-]?[0-9]+")


def as_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if _INT_RE.fullmatch(raw):
            try:
                return int(raw)
            except ValueError:
                # Past the interpreter's int digit limit; treat as text.
                return None
    return None


def group_key(qr: QrId | None) -> QrId | None:
    """
    Canonical group key: "5" and 5 land in the same group.
    """
    if qr is None:
        return None
    number = as_int(qr)
    if number is not None:
        return number
    text = str(qr).strip()
    return text or None


def color_index(key: QrId | None, palette_size: int = PALETTE_SIZE) -> int:
    if palette_size <= 0:
        raise ValueError("palette_size must be positive.")
    if key is None:
        key = UNGROUPED_LABEL
    number = as_int(key)
    if number is not None:
        return number % palette_size
    return sum(ord(ch) for ch in str(key)) % palette_size


def matches_query(entry: Entry, query: str) -> bool:
    needle = (query or "").casefold()
    if not needle:
        return True
    return needle in entry.name.casefold() or needle in entry.mobile.casefold()


def matches_group(entry: Entry, group_filter: QrId) -> bool:
    if entry.qr is None:
        return False
    if entry.qr == group_filter:
        return True
    wanted = as_int(group_filter)
    return wanted is not None and as_int(entry.qr) == wanted


def _collation_key(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _entry_sort_key(entry: Entry) -> tuple[str, str, str, str]:
    # Raw fields break ties so equal names still order deterministically.
    return (_collation_key(entry.name), entry.name, entry.mobile, repr(entry.qr))


def _group_sort_key(key: QrId | None) -> tuple[int, int, str]:
    if key is None:
        return (2, 0, "")
    if isinstance(key, int):
        return (0, key, "")
    return (1, 0, str(key))


def aggregate(
    entries: Iterable[Entry],
    query: str = "",
    group_filter: QrId | None = None,
    *,
    palette_size: int = PALETTE_SIZE,
) -> list[EntryGroup]:
    if isinstance(group_filter, str) and not group_filter.strip():
        group_filter = None

    buckets: dict[QrId | None, list[Entry]] = {}
    for entry in entries:
        if not matches_query(entry, query):
            continue
        if group_filter is not None and not matches_group(entry, group_filter):
            continue
        buckets.setdefault(group_key(entry.qr), []).append(entry)

    return [
        EntryGroup(
            key=key,
            color_index=color_index(key, palette_size),
            entries=tuple(sorted(buckets[key], key=_entry_sort_key)),
        )
        for key in sorted(buckets, key=_group_sort_key)
    ]


def flatten(groups: Sequence[EntryGroup]) -> list[Entry]:
    return [entry for group in groups for entry in group.entries]


def parse_qr_from_path(path: str) -> int | None:
    """
    QR id from a deep link such as `/add/42` (last path segment, digits only).
    """
    segments = [part for part in (path or "").split("?", 1)[0].split("/") if part]
    if not segments:
        return None
    last = segments[-1].strip()
    if not (last.isascii() and last.isdigit()):
        return None
    try:
        return int(last)
    except ValueError:
        return None
