import json
from pathlib import Path
from typing import Dict, List, Optional

from records import (
    HydrationSettings,
    HydrationSlot,
    MealEntry,
    TrainingProgram,
    decode_record,
    decode_records,
    encode_record,
    encode_records,
)

HYDRATION_ENTRIES_KEY = "hydrationEntries"
HYDRATION_SETTINGS_KEY = "hydrationSettings"
MEAL_ENTRIES_KEY = "mealEntries"
SAVED_TRAININGS_KEY = "savedTrainings"
ONBOARDING_COMPLETED_KEY = "isOnboardingCompleted"

# Keys wiped by a full data reset; the onboarding flag survives
DOMAIN_KEYS = (
    HYDRATION_ENTRIES_KEY,
    HYDRATION_SETTINGS_KEY,
    MEAL_ENTRIES_KEY,
    SAVED_TRAININGS_KEY,
)


class PersistentStorage:
    """Key-value blob store backed by one JSON file per key"""

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[bytes]:
        """Read a blob, None when the key is missing or unreadable"""
        try:
            return self._path_for(key).read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            print(f"Error reading {key}: {e}")
            return None

    def write(self, key: str, blob: bytes) -> bool:
        """Write a blob, returns False when the write was dropped"""
        file_path = self._path_for(key)
        try:
            # Write to temp file first, then rename for atomic operation
            temp_file = file_path.with_suffix('.tmp')
            temp_file.write_bytes(blob)
            temp_file.replace(file_path)
            return True
        except OSError as e:
            print(f"Error writing {file_path}: {e}")
            return False

    def delete(self, key: str):
        try:
            self._path_for(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            print(f"Error deleting {key}: {e}")

    def keys(self) -> List[str]:
        return sorted(path.stem for path in self.data_dir.glob("*.json"))

    # Hydration

    def load_hydration_slots(self) -> List[HydrationSlot]:
        """Load all stored slots; corrupt or missing data reads as empty"""
        blob = self.read(HYDRATION_ENTRIES_KEY)
        if blob is None:
            return []
        try:
            return decode_records(blob, HydrationSlot.from_dict)
        except ValueError as e:
            print(f"⚠️ Discarding unreadable hydration entries: {e}")
            return []

    def save_hydration_slots(self, slots: List[HydrationSlot]) -> bool:
        return self.write(HYDRATION_ENTRIES_KEY, encode_records(slots))

    def load_hydration_settings(self) -> HydrationSettings:
        blob = self.read(HYDRATION_SETTINGS_KEY)
        if blob is None:
            return HydrationSettings()
        try:
            return decode_record(blob, HydrationSettings.from_dict)
        except ValueError as e:
            print(f"⚠️ Using default hydration settings: {e}")
            return HydrationSettings()

    def save_hydration_settings(self, settings: HydrationSettings) -> bool:
        return self.write(HYDRATION_SETTINGS_KEY, encode_record(settings))

    # Nutrition

    def load_meal_entries(self) -> List[MealEntry]:
        blob = self.read(MEAL_ENTRIES_KEY)
        if blob is None:
            return []
        try:
            return decode_records(blob, MealEntry.from_dict)
        except ValueError as e:
            print(f"⚠️ Discarding unreadable meal entries: {e}")
            return []

    def save_meal_entries(self, entries: List[MealEntry]) -> bool:
        return self.write(MEAL_ENTRIES_KEY, encode_records(entries))

    # Trainings

    def load_saved_trainings(self) -> List[TrainingProgram]:
        blob = self.read(SAVED_TRAININGS_KEY)
        if blob is None:
            return []
        try:
            return decode_records(blob, TrainingProgram.from_dict)
        except ValueError as e:
            print(f"⚠️ Discarding unreadable saved trainings: {e}")
            return []

    def save_saved_trainings(self, trainings: List[TrainingProgram]) -> bool:
        return self.write(SAVED_TRAININGS_KEY, encode_records(trainings))

    # Onboarding

    def is_onboarding_completed(self) -> bool:
        blob = self.read(ONBOARDING_COMPLETED_KEY)
        if blob is None:
            return False
        try:
            return json.loads(blob.decode("utf-8")) is True
        except ValueError:
            return False

    def set_onboarding_completed(self, completed: bool = True) -> bool:
        return self.write(ONBOARDING_COMPLETED_KEY, json.dumps(completed).encode("utf-8"))


class InMemoryStorage(PersistentStorage):
    """Process-local storage with the same interface, used by tests and previews"""

    def __init__(self, blobs: Optional[Dict[str, bytes]] = None):
        self.blobs: Dict[str, bytes] = dict(blobs or {})

    def read(self, key: str) -> Optional[bytes]:
        return self.blobs.get(key)

    def write(self, key: str, blob: bytes) -> bool:
        self.blobs[key] = blob
        return True

    def delete(self, key: str):
        self.blobs.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self.blobs)
