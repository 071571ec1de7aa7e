"""
Interval arithmetic on clock times and timestamps.

Every time value is normalized to minutes before it is compared:

  "09:30"                       -> 570            (clock of day)
  "2024-02-05T09:30:00Z"        -> 570            (minutes past the anchor's midnight, UTC)
  datetime(..., tzinfo=...)     -> same as the ISO string
  570                           -> 570            (already normalized)

When timestamps from different calendar days are compared, they share one
anchor date (the earliest UTC date among the compared values), so a meeting
on Tuesday at 09:00 does not collide with one on Monday at 09:00.

Overlap classification for chunk1 against chunk2:

  none      no shared minute (touching ends do not overlap)
  exact     same start, same end
  encloses  chunk1 contains chunk2
  enclosed  chunk1 lies inside chunk2
  left      chunk1 starts first and ends inside chunk2
  right     chunk1 starts inside chunk2 and ends after it

Reference: Python docs — datetime
https://docs.python.org/3/library/datetime.html
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

TimeValue = Union[str, int, float, datetime]

NONE     = "none"
EXACT    = "exact"
LEFT     = "left"
RIGHT    = "right"
ENCLOSED = "enclosed"
ENCLOSES = "encloses"


@dataclass(frozen=True)
class TimeChunk:
    start: TimeValue
    end:   TimeValue


# ── parsing ──────────────────────────────────────────────────────────────────

def parse_datetime(value: Union[str, datetime]) -> datetime:
    """Parse an ISO-8601 timestamp. Naive values are taken to be UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def parse_clock(value: str) -> int:
    """'09:30', '09:30:00' or '09:00:00.000Z' -> minutes from midnight."""
    text = value.strip().rstrip("Z")
    parts = text.split(":")
    if len(parts) < 2:
        raise ValueError(f"Not a clock time: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 24 and 0 <= minutes < 60):
        raise ValueError(f"Clock time out of range: {value!r}")
    return hours * 60 + minutes


def format_clock(minutes: float) -> str:
    m = int(minutes)
    return f"{m // 60:02d}:{m % 60:02d}"


def to_utc_iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="seconds")


def is_timestamp(value: TimeValue) -> bool:
    if isinstance(value, datetime):
        return True
    if isinstance(value, str):
        if "T" in value:
            return True
        # "2024-02-05" is a timestamp at midnight, "09:00:00.000Z" is a clock
        return len(value) > 8 and "-" in value and not value.endswith("Z")
    return False


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Inclusive daily walk from start to end."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


# ── normalization ────────────────────────────────────────────────────────────

def _utc_midnight(day: date) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=timezone.utc)


def _minutes(seconds: float) -> float:
    m = seconds / 60
    return int(m) if m == int(m) else m


def anchor_date(values: Iterable[TimeValue]) -> Optional[date]:
    """Earliest UTC date among the timestamp values, or None."""
    days = [parse_datetime(v).astimezone(timezone.utc).date()
            for v in values if is_timestamp(v)]
    return min(days) if days else None


def normalize_time(value: TimeValue, anchor: Optional[date] = None) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if is_timestamp(value):
        dt = parse_datetime(value).astimezone(timezone.utc)
        base = anchor or dt.date()
        return _minutes((dt - _utc_midnight(base)).total_seconds())
    return parse_clock(str(value))


def denormalize_time(minutes: float, like: TimeValue,
                     anchor: Optional[date] = None) -> TimeValue:
    """Convert minutes back into the representation of `like`."""
    if isinstance(like, (int, float)) and not isinstance(like, bool):
        return minutes
    if is_timestamp(like):
        base = anchor or parse_datetime(like).astimezone(timezone.utc).date()
        dt = _utc_midnight(base) + timedelta(minutes=minutes)
        return dt if isinstance(like, datetime) else to_utc_iso(dt)
    return format_clock(minutes)


def _bounds(*chunks: TimeChunk) -> Tuple[List[Tuple[float, float]], Optional[date]]:
    anchor = anchor_date(v for c in chunks for v in (c.start, c.end))
    return ([(normalize_time(c.start, anchor), normalize_time(c.end, anchor))
             for c in chunks], anchor)


# ── pairwise operations ──────────────────────────────────────────────────────

def overlaps(a: TimeChunk, b: TimeChunk) -> bool:
    """True if the chunks share at least one minute."""
    ((s1, e1), (s2, e2)), _ = _bounds(a, b)
    return not (e1 <= s2 or s1 >= e2)


def classify(a: TimeChunk, b: TimeChunk) -> str:
    """How chunk a sits relative to chunk b (see module docstring)."""
    ((s1, e1), (s2, e2)), _ = _bounds(a, b)
    if e1 <= s2 or s1 >= e2:
        return NONE
    if s1 == s2 and e1 == e2:
        return EXACT
    if s1 <= s2 and e1 >= e2:
        return ENCLOSES
    if s1 >= s2 and e1 <= e2:
        return ENCLOSED
    if s1 < s2 < e1 < e2:
        return LEFT
    if s2 < s1 < e2 < e1:
        return RIGHT
    return NONE


def is_left_overlap(a: TimeChunk, b: TimeChunk) -> bool:
    return classify(a, b) == LEFT


def is_right_overlap(a: TimeChunk, b: TimeChunk) -> bool:
    return classify(a, b) == RIGHT


def is_enclosed(a: TimeChunk, b: TimeChunk) -> bool:
    ((s1, e1), (s2, e2)), _ = _bounds(a, b)
    return s1 >= s2 and e1 <= e2


def is_encloses(a: TimeChunk, b: TimeChunk) -> bool:
    ((s1, e1), (s2, e2)), _ = _bounds(a, b)
    return s1 <= s2 and e1 >= e2


def is_exact_match(a: TimeChunk, b: TimeChunk) -> bool:
    ((s1, e1), (s2, e2)), _ = _bounds(a, b)
    return s1 == s2 and e1 == e2


def overlap_minutes(a: TimeChunk, b: TimeChunk) -> float:
    ((s1, e1), (s2, e2)), _ = _bounds(a, b)
    if e1 <= s2 or s1 >= e2:
        return 0
    return min(e1, e2) - max(s1, s2)


def time_difference(t1: TimeValue, t2: TimeValue) -> float:
    """Minutes from t1 to t2 (negative when t2 is earlier)."""
    anchor = anchor_date((t1, t2))
    return normalize_time(t2, anchor) - normalize_time(t1, anchor)


def in_range(t: TimeValue, chunk: TimeChunk) -> bool:
    """Half-open membership: start <= t < end."""
    anchor = anchor_date((t, chunk.start, chunk.end))
    v = normalize_time(t, anchor)
    return normalize_time(chunk.start, anchor) <= v < normalize_time(chunk.end, anchor)


def duration_minutes(chunk: TimeChunk) -> float:
    ((s, e),), _ = _bounds(chunk)
    return e - s


# ── list operations ──────────────────────────────────────────────────────────

def find_all_overlaps(chunks: Sequence[TimeChunk]) -> List[Tuple[int, int, str]]:
    """Every overlapping pair as (i, j, kind), i < j. O(n^2)."""
    found = []
    for i in range(len(chunks)):
        for j in range(i + 1, len(chunks)):
            kind = classify(chunks[i], chunks[j])
            if kind != NONE:
                found.append((i, j, kind))
    return found


def merge_chunks(chunks: Sequence[TimeChunk]) -> List[TimeChunk]:
    """
    Merge overlapping or touching chunks.

    Result is sorted by start and pairwise non-overlapping. Values keep the
    representation of the chunk that opened each merged run. O(n log n).
    """
    if not chunks:
        return []
    bounds, anchor = _bounds(*chunks)
    order = sorted(range(len(chunks)), key=lambda i: bounds[i][0])

    merged: List[TimeChunk] = []
    first = order[0]
    like = chunks[first].start
    cur_s, cur_e = bounds[first]
    for i in order[1:]:
        s, e = bounds[i]
        if s <= cur_e:
            cur_e = max(cur_e, e)
        else:
            merged.append(TimeChunk(denormalize_time(cur_s, like, anchor),
                                    denormalize_time(cur_e, like, anchor)))
            like = chunks[i].start
            cur_s, cur_e = s, e
    merged.append(TimeChunk(denormalize_time(cur_s, like, anchor),
                            denormalize_time(cur_e, like, anchor)))
    return merged


def total_minutes(chunks: Sequence[TimeChunk]) -> float:
    """Busy minutes covered by the chunks, overlaps counted once."""
    if not chunks:
        return 0
    anchor = anchor_date(v for c in chunks for v in (c.start, c.end))
    total = 0
    for c in merge_chunks(chunks):
        total += normalize_time(c.end, anchor) - normalize_time(c.start, anchor)
    return total


def subtract(base: TimeChunk, busy: Sequence[TimeChunk]) -> List[TimeChunk]:
    """
    Free windows of `base` once every busy chunk is removed.

    Sort-and-sweep over the merged busy list; busy chunks entirely outside
    the base window are ignored.
    """
    if not busy:
        return [base]
    anchor = anchor_date(v for c in (base, *busy) for v in (c.start, c.end))
    base_s = normalize_time(base.start, anchor)
    base_e = normalize_time(base.end, anchor)

    free: List[TimeChunk] = []
    cursor = base_s
    for c in merge_chunks(busy):
        s = normalize_time(c.start, anchor)
        e = normalize_time(c.end, anchor)
        if e <= base_s or s >= base_e:
            continue
        if cursor < s:
            free.append(TimeChunk(denormalize_time(cursor, base.start, anchor),
                                  denormalize_time(s, base.start, anchor)))
        cursor = max(cursor, e)
    if cursor < base_e:
        free.append(TimeChunk(denormalize_time(cursor, base.start, anchor), base.end))
    return free
