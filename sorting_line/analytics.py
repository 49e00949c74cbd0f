"""Rolling analytics over processed records"""

from collections import Counter

from sorting_line.models import BINS

FILTER_ALL = 'all'


def parse_time_filter(time_filter):
    """
    Return the window in milliseconds, or None for "all".

    Zero or negative windows are applied as-is, so no past record matches;
    only text that is not an integer falls back to "all".
    """
    if time_filter is None or str(time_filter).strip().lower() == FILTER_ALL:
        return None
    try:
        window = int(str(time_filter).strip())
    except ValueError:
        print(f"[APP] Unknown time filter {time_filter!r}, showing all data")
        return None
    return window


def filter_records(records, time_filter, now):
    """Keep records whose age (now - timestamp) is strictly below the window."""
    window = parse_time_filter(time_filter)
    if window is None:
        return list(records)
    return [r for r in records if (now - r.timestamp) < window]


def summarize(records):
    """Aggregate counts shown by the dashboards."""
    total = len(records)
    correct = sum(1 for r in records if r.is_correct)
    faults = sum(1 for r in records if r.fault_injected)
    by_bin = Counter(r.sorted_to for r in records)
    by_category = Counter(r.category for r in records)
    return {
        "total": total,
        "correct": correct,
        "misrouted": total - correct,
        "faults": faults,
        "accuracy": round(correct / total, 4) if total else None,
        "by_bin": {b: by_bin.get(b, 0) for b in BINS},
        "by_category": {c: by_category.get(c, 0) for c in BINS},
        "last_timestamp": max((r.timestamp for r in records), default=None),
    }
