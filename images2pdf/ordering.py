from typing import List, Sequence

from natsort import natsort_keygen, ns

from .models import ImageEntry, SortMode

# Locale-aware, case-insensitive, numeric runs compared as numbers.
_natural_key = natsort_keygen(alg=ns.LOCALE | ns.IGNORECASE)

_DESCRIPTIONS = {
    SortMode.MANUAL: "Manual ordering; use Up/Down to rearrange.",
    SortMode.NAME_ASCENDING: "Sorted by file name (A → Z).",
    SortMode.NAME_DESCENDING: "Sorted by file name (Z → A).",
    SortMode.TIME_NEWEST_FIRST: "Sorted by modification time (newest first).",
    SortMode.TIME_OLDEST_FIRST: "Sorted by modification time (oldest first).",
}


def describe(mode: SortMode) -> str:
    return _DESCRIPTIONS[SortMode.parse(mode)]


def _name_key(entry: ImageEntry):
    return _natural_key(entry.name), _natural_key(str(entry.path))


def _sort_by_name(entries: Sequence[ImageEntry], ascending: bool) -> List[ImageEntry]:
    return sorted(entries, key=_name_key, reverse=not ascending)


def _sort_by_time(entries: Sequence[ImageEntry], newest_first: bool) -> List[ImageEntry]:
    stamped = [(entry.modified_ns(), str(entry.path), entry) for entry in entries]
    # Equal timestamps always fall back to ascending path order.
    if newest_first:
        stamped.sort(key=lambda item: (-item[0], item[1]))
    else:
        stamped.sort(key=lambda item: (item[0], item[1]))
    return [item[2] for item in stamped]


def sort_entries(entries: Sequence[ImageEntry], mode: SortMode) -> List[ImageEntry]:
    """Return a new list ordered according to ``mode``; the input is left untouched."""
    mode = SortMode.parse(mode)
    if mode == SortMode.MANUAL or len(entries) < 2:
        return list(entries)
    if mode == SortMode.NAME_ASCENDING:
        return _sort_by_name(entries, ascending=True)
    if mode == SortMode.NAME_DESCENDING:
        return _sort_by_name(entries, ascending=False)
    if mode == SortMode.TIME_NEWEST_FIRST:
        return _sort_by_time(entries, newest_first=True)
    return _sort_by_time(entries, newest_first=False)


def move_entry(entries: Sequence[ImageEntry], from_index: int, to_index: int) -> List[ImageEntry]:
    result = list(entries)
    count = len(result)
    if not (0 <= from_index < count) or not (0 <= to_index < count) or from_index == to_index:
        return result
    entry = result.pop(from_index)
    result.insert(to_index, entry)
    return result
