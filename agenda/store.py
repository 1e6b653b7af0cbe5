"""
JSON-backed data access for the clinic agenda.

This is the CRUD collaborator the scheduling core reads snapshots from.
It keeps fetched collections in an explicit SessionCache with a load
timestamp; every write invalidates the cache so the next read reloads.
"""

import json
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from models import Appointment, Doctor, Event, parse_activity
from models.errors import ActivityNotFound

logger = logging.getLogger(__name__)

AnyActivity = Union[Appointment, Event]


@dataclass
class SessionCache:
    """Fetched collections plus the moment they were loaded."""
    max_age_seconds: float = 300.0
    clock: Callable[[], float] = time.time
    doctors: List[Doctor] = field(default_factory=list)
    activities: List[AnyActivity] = field(default_factory=list)
    loaded_at: Optional[float] = None

    def fill(self, doctors: List[Doctor], activities: List[AnyActivity]) -> None:
        self.doctors = list(doctors)
        self.activities = list(activities)
        self.loaded_at = self.clock()

    def invalidate(self) -> None:
        self.doctors = []
        self.activities = []
        self.loaded_at = None

    @property
    def is_fresh(self) -> bool:
        if self.loaded_at is None:
            return False
        return (self.clock() - self.loaded_at) <= self.max_age_seconds


class ActivityStore:
    """
    File-backed store of doctors and activities.

    Layout of the file:
        {"doctors": [...], "activities": [...]}
    where each activity dict carries a "type" of "appointment" or "event".
    """

    def __init__(self, path: str, cache: Optional[SessionCache] = None):
        self.path = path
        self.cache = cache or SessionCache()

    # --- Reads ---

    def list_doctors(self) -> List[Doctor]:
        self._ensure_loaded()
        return list(self.cache.doctors)

    def list_activities(self) -> List[AnyActivity]:
        """Snapshot of every activity in insertion (file) order."""
        self._ensure_loaded()
        return list(self.cache.activities)

    def get(self, activity_id: str) -> AnyActivity:
        for item in self.list_activities():
            if item.id == activity_id:
                return item
        raise ActivityNotFound(activity_id)

    # --- Writes ---

    def save(self, activity: AnyActivity) -> AnyActivity:
        """Insert, or replace in place when the id already exists."""
        data = self._load_raw()
        action = self._upsert(data["activities"], activity.model_dump(mode="json"))
        self._write_raw(data)
        logger.info(f"{action} {activity.type} {activity.id}")
        return activity

    def delete(self, activity_id: str) -> None:
        data = self._load_raw()
        remaining = [a for a in data["activities"] if _raw_id(a) != activity_id]
        if len(remaining) == len(data["activities"]):
            raise ActivityNotFound(activity_id)
        data["activities"] = remaining
        self._write_raw(data)
        logger.info(f"Deleted activity {activity_id}")

    def save_doctor(self, doctor: Doctor) -> Doctor:
        data = self._load_raw()
        self._upsert(data["doctors"], doctor.model_dump(mode="json"))
        self._write_raw(data)
        return doctor

    # --- Internals ---

    def _ensure_loaded(self) -> None:
        if self.cache.is_fresh:
            return
        doctors, activities = self._read_file()
        self.cache.fill(doctors, activities)
        logger.info(f"Loaded {len(activities)} activities and {len(doctors)} doctors from {self.path}")

    def _read_file(self):
        data = self._load_raw()

        doctors = []
        for i, item in enumerate(data["doctors"]):
            try:
                doctors.append(Doctor.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid doctor {i}: {e.json()}")

        activities = []
        for i, item in enumerate(data["activities"]):
            try:
                activities.append(parse_activity(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid activity {i}: {e.json()}")

        return doctors, activities

    def _load_raw(self) -> Dict[str, Any]:
        """
        The file exactly as stored. Writes work on these raw records so rows
        the current models reject are kept untouched.
        """
        if not os.path.exists(self.path):
            return {"doctors": [], "activities": []}

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        data.setdefault("doctors", [])
        data.setdefault("activities", [])
        return data

    @staticmethod
    def _upsert(records: List[Any], record: Dict[str, Any]) -> str:
        for i, item in enumerate(records):
            if _raw_id(item) == record["id"]:
                records[i] = record
                return "Updated"
        records.append(record)
        return "Created"

    def _write_raw(self, data: Dict[str, Any]) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        self.cache.invalidate()


def _raw_id(item: Any) -> Optional[str]:
    return item.get("id") if isinstance(item, dict) else None
