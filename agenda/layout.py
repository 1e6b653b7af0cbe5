"""
The Overlap Layout Engine.

Packs the activities of one calendar day into side-by-side lanes so that
concurrent cards never sit on top of each other in the day/week grid.

Strategy (greedy interval partitioning, single pass over start-sorted items):
1. Clusters - a run of mutually overlapping items. A cluster closes as soon as
   an item starts at or after the latest end seen in it.
2. Columns - inside a cluster each item drops into the first column whose last
   item has already ended; otherwise it opens a new column.
3. Widths - up to 3 columns split the usable width equally; 4+ columns fan out
   as fixed-width cascading cards instead of ever-thinner slivers.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from models import Appointment, Event, LaneAssignment, LayoutResult
from models.errors import NonPositiveDuration
from models.timeutil import to_minutes

logger = logging.getLogger(__name__)

AnyActivity = Union[Appointment, Event]


@dataclass
class _Placed:
    """Working record for one activity while its cluster is still open."""
    activity: AnyActivity
    start_min: int
    end_min: int
    column_index: int = 0
    lane: Optional[LaneAssignment] = None


class LayoutEngine:
    """
    Computes a Lane Assignment for every activity of a single day.
    Holds configuration only; every call starts from scratch.
    """

    # Percent of the day column available to cards (the rest is a right margin)
    USABLE_WIDTH = 96.0
    # Beyond this many columns the engine switches to cascading cards
    MAX_EQUAL_COLUMNS = 3
    # Cascading cards never get narrower than this (percent)
    MIN_CASCADE_WIDTH = 35.0

    def layout_day(self, activities: Sequence[AnyActivity]) -> List[LayoutResult]:
        """
        Execute the layout pipeline.
        Results come back in start-time order (ties keep their input order).
        """
        if not activities:
            return []

        dates = {a.date for a in activities}
        if len(dates) > 1:
            raise ValueError(f"layout_day expects a single calendar date, got {len(dates)}")

        # 1. Sort + expand to minute offsets (sorted() is stable)
        expanded = [self._expand(a) for a in activities]
        expanded.sort(key=lambda p: p.start_min)

        # 2. Walk the day, closing clusters as they end
        columns: List[List[_Placed]] = []
        last_event_ending: Optional[int] = None

        for item in expanded:
            if last_event_ending is not None and item.start_min >= last_event_ending:
                self._finalize_cluster(columns)
                columns = []
                last_event_ending = None

            placed = False
            for idx, col in enumerate(columns):
                if col[-1].end_min <= item.start_min:
                    item.column_index = idx
                    col.append(item)
                    placed = True
                    break

            if not placed:
                item.column_index = len(columns)
                columns.append([item])

            if last_event_ending is None or item.end_min > last_event_ending:
                last_event_ending = item.end_min

        # 3. Flush the trailing cluster
        if columns:
            self._finalize_cluster(columns)

        return [LayoutResult(activity=p.activity, lane=p.lane) for p in expanded]

    def _expand(self, activity: AnyActivity) -> _Placed:
        # A zero/negative interval would never close its column.
        if activity.duration_minutes <= 0:
            raise NonPositiveDuration(activity.duration_minutes, activity.id)
        start_min = to_minutes(activity.start_time)
        return _Placed(activity=activity, start_min=start_min, end_min=start_min + activity.duration_minutes)

    def _finalize_cluster(self, columns: List[List[_Placed]]) -> None:
        """Assign width and offset to every item of a closed cluster."""
        num_cols = len(columns)
        width, step = self.column_geometry(num_cols)
        logger.debug(f"Closing cluster: {num_cols} column(s), width={width:.2f}, step={step:.2f}")

        for idx, col in enumerate(columns):
            for item in col:
                item.lane = LaneAssignment(
                    column_index=idx,
                    column_count=num_cols,
                    width_fraction=width,
                    left_offset_fraction=idx * step,
                )

    def column_geometry(self, num_cols: int):
        """
        (card width, offset step) for a cluster of num_cols columns.
        Equal division up to MAX_EQUAL_COLUMNS, fan-cascade above it.
        """
        if num_cols < 1:
            raise ValueError("A cluster has at least one column")

        if num_cols <= self.MAX_EQUAL_COLUMNS:
            width = self.USABLE_WIDTH / num_cols
            return width, width

        min_width = max(self.MIN_CASCADE_WIDTH, self.USABLE_WIDTH / min(num_cols, self.MAX_EQUAL_COLUMNS))
        offset_step = (self.USABLE_WIDTH - min_width) / (num_cols - 1)
        return min_width, offset_step


_default_engine = LayoutEngine()


def layout_day(activities: Sequence[AnyActivity]) -> List[LayoutResult]:
    """Lay out one day's activities with the default engine settings."""
    return _default_engine.layout_day(activities)
