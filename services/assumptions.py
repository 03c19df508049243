"""Assumptions snapshot selection.

Snapshots are versioned, time-boxed regional price and carbon-intensity
records. When a caller does not name one explicitly, the region's snapshot
with the most recent ``period_start`` is used.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import pandas as pd

from config.settings import default_region
from services.store import RecordNotFoundError

logger = logging.getLogger(__name__)

SNAPSHOT_KIND = "assumptions_snapshots"


def _as_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Parse dates, datetimes and ISO strings to a UTC timestamp; None if unparseable."""
    if value is None or value == "":
        return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")


def _region_snapshots(snapshots: Iterable[dict], region_code: str) -> list[tuple[pd.Timestamp, dict]]:
    out = []
    for snap in snapshots:
        if snap.get("region_code") != region_code:
            continue
        start = _as_timestamp(snap.get("period_start"))
        if start is None:
            logger.warning("Skipping snapshot %r with unreadable period_start", snap.get("id"))
            continue
        out.append((start, snap))
    return out


def latest_snapshot(snapshots: Iterable[dict], region_code: str) -> Optional[dict]:
    """The region's snapshot with the greatest period_start, or None."""
    candidates = _region_snapshots(snapshots, region_code)
    if not candidates:
        return None
    return max(candidates, key=lambda pair: pair[0])[1]


def snapshots_in_range(
    snapshots: Iterable[dict],
    region_code: str,
    date_from: Any = None,
    date_to: Any = None,
) -> list[dict]:
    """Region snapshots whose period_start falls within [date_from, date_to], oldest first."""
    lower = _as_timestamp(date_from)
    upper = _as_timestamp(date_to)
    selected = [
        (start, snap)
        for start, snap in _region_snapshots(snapshots, region_code)
        if (lower is None or start >= lower) and (upper is None or start <= upper)
    ]
    selected.sort(key=lambda pair: pair[0])
    return [snap for _, snap in selected]


def resolve_snapshot(
    snapshots: Iterable[dict],
    snapshot_id: Any = None,
    region_code: str | None = None,
) -> dict:
    """
    Resolve the snapshot a projection should price against.

    An explicit ``snapshot_id`` wins; otherwise the latest snapshot for
    ``region_code`` (or the configured default region) is returned.

    Raises
    ------
    RecordNotFoundError
        If the id does not exist or the region has no snapshots.
    """
    snapshots = list(snapshots)
    if snapshot_id:
        for snap in snapshots:
            if str(snap.get("id")) == str(snapshot_id):
                return snap
        raise RecordNotFoundError(SNAPSHOT_KIND, snapshot_id)

    region = region_code or default_region()
    snap = latest_snapshot(snapshots, region)
    if snap is None:
        raise RecordNotFoundError(SNAPSHOT_KIND, f"latest for region {region}")
    return snap
