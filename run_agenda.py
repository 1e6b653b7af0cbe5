"""
Main Execution Script for the clinic agenda.

Loads an agenda file, prints a week report (lanes, conflicts, doctor load)
and exports the lane assignments as JSON for the calendar frontend.

Usage: python run_agenda.py [YYYY-MM-DD]
"""

import json
import logging
import os
import sys
from datetime import date

from agenda.conflicts import find_conflicts
from agenda.store import ActivityStore, SessionCache
from agenda.view import CalendarView, without_cancelled

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")

# --- CONFIGURATION ---
DATA_FILE = os.environ.get("AGENDA_DATA_FILE", "data/sample_agenda.json")
EXPORT_FILE = os.environ.get("AGENDA_EXPORT_FILE", "agenda_layout.json")
CACHE_SECONDS = float(os.environ.get("AGENDA_CACHE_SECONDS", "300"))
# ---------------------


def export_layout_data(view: CalendarView, anchor: date, filename: str):
    """
    Serializes the week's lane assignments into a JSON format for the frontend.
    """
    logger.info(f"Exporting layout data to {filename}...")

    data = {"week_of": anchor.isoformat(), "days": {}}
    for day, results in view.week_layout(anchor).items():
        data["days"][day.isoformat()] = [
            {
                "activity": r.activity.model_dump(mode='json'),
                "end_time": r.activity.end_time,
                "lane": r.lane.model_dump(mode='json'),
            }
            for r in results
        ]

    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.info("Layout data exported.")


def print_week_report(view: CalendarView, anchor: date):
    doctors = {d.id: d for d in view.store.list_doctors()}

    print("\n" + "=" * 50)
    print(f"AGENDA - week of {anchor.isoformat()}")
    print("=" * 50)

    for day, results in view.week_layout(anchor).items():
        if not results:
            continue
        print(f"\n{day.strftime('%a %d %b')}")
        for r in results:
            act, lane = r.activity, r.lane
            who = doctors[act.resource_id].name if act.resource_id in doctors else "-"
            label = act.treatment if act.type == "appointment" else act.title
            status = f" [{act.status.label}]" if act.type == "appointment" else ""
            print(
                f"  {act.start_time}-{act.end_time}  {label:<22} {who:<20}"
                f" col {lane.column_index + 1}/{lane.column_count}"
                f" w={lane.width_fraction:.1f}% left={lane.left_offset_fraction:.1f}%{status}"
            )

        stats = view.day_statistics(day)
        if stats["busiest_doctor"]:
            doc_id, count = stats["busiest_doctor"]
            print(f"  busiest: {doctors[doc_id].name if doc_id in doctors else doc_id} ({count})")

    clashes = find_conflicts(without_cancelled(view.store.list_activities()))
    if clashes:
        print("\nDOUBLE BOOKINGS FOUND")
        for a, b in clashes:
            print(f"  {a.date} {a.resource_id}: {a.id} ({a.start_time}) x {b.id} ({b.start_time})")


def main():
    anchor = date.fromisoformat(sys.argv[1]) if len(sys.argv) > 1 else date.today()

    if not os.path.exists(DATA_FILE):
        logger.error(f"Agenda file {DATA_FILE} not found. Set AGENDA_DATA_FILE.")
        return 1

    store = ActivityStore(DATA_FILE, cache=SessionCache(max_age_seconds=CACHE_SECONDS))
    view = CalendarView(store)

    print_week_report(view, anchor)
    export_layout_data(view, anchor, EXPORT_FILE)
    return 0


if __name__ == "__main__":
    sys.exit(main())
