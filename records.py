import json
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, TypeVar

SMALL_AMOUNT = "300ml"
LARGE_AMOUNT = "500ml"

_AMOUNT_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*ml", re.IGNORECASE)
_GRAMS_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)")

T = TypeVar("T")


def _new_id() -> str:
    return str(uuid.uuid4())


def parse_labeled_quantity(label: str) -> float:
    """Parse the leading number of a labeled quantity like '15g' or '420'"""
    match = _GRAMS_PATTERN.match(label or "")
    return float(match.group(1)) if match else 0.0


@dataclass
class HydrationSlot:
    amount: str
    scheduled_time: datetime
    is_completed: bool = False
    id: str = field(default_factory=_new_id)

    @property
    def amount_ml(self) -> float:
        """Milliliters parsed from the amount label, 0 when unparseable"""
        match = _AMOUNT_PATTERN.match(self.amount or "")
        return float(match.group(1)) if match else 0.0

    def is_overdue(self, now: datetime, overdue_minutes: int = 60) -> bool:
        return not self.is_completed and now > self.scheduled_time + timedelta(minutes=overdue_minutes)

    def is_active(self, now: datetime) -> bool:
        return now >= self.scheduled_time

    def status(self, now: datetime, overdue_minutes: int = 60) -> str:
        if self.is_completed:
            return "completed"
        if self.is_overdue(now, overdue_minutes):
            return "overdue"
        if self.is_active(now):
            return "active"
        return "upcoming"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "time": self.scheduled_time.isoformat(),
            "isCompleted": self.is_completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HydrationSlot":
        return cls(
            id=str(data["id"]),
            amount=str(data["amount"]),
            scheduled_time=datetime.fromisoformat(data["time"]),
            is_completed=bool(data.get("isCompleted", False)),
        )


@dataclass
class HydrationSettings:
    daily_goal_liters: float = 3.5
    reminder_lead_minutes: int = 15
    sound_enabled: bool = True
    vibration_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dailyGoal": self.daily_goal_liters,
            "reminderTime": self.reminder_lead_minutes,
            "soundNotifications": self.sound_enabled,
            "vibrationEnabled": self.vibration_enabled,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HydrationSettings":
        defaults = cls()
        return cls(
            daily_goal_liters=float(data.get("dailyGoal", defaults.daily_goal_liters)),
            reminder_lead_minutes=int(data.get("reminderTime", defaults.reminder_lead_minutes)),
            sound_enabled=bool(data.get("soundNotifications", defaults.sound_enabled)),
            vibration_enabled=bool(data.get("vibrationEnabled", defaults.vibration_enabled)),
        )


@dataclass
class MealEntry:
    meal_type: str
    time: str
    calories: str
    food_name: str
    protein: str = "0g"
    carbs: str = "0g"
    fats: str = "0g"
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mealType": self.meal_type,
            "time": self.time,
            "calories": self.calories,
            "foodName": self.food_name,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MealEntry":
        return cls(
            id=str(data["id"]),
            meal_type=str(data["mealType"]),
            time=str(data["time"]),
            calories=str(data["calories"]),
            food_name=str(data["foodName"]),
            protein=str(data.get("protein", "0g")),
            carbs=str(data.get("carbs", "0g")),
            fats=str(data.get("fats", "0g")),
        )


@dataclass
class TrainingProgram:
    name: str
    description: str
    level: str
    duration: str
    icon_name: Optional[str] = None
    is_default: bool = False
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "level": self.level,
            "duration": self.duration,
            "iconName": self.icon_name,
            "isDefault": self.is_default,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrainingProgram":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description", "")),
            level=str(data["level"]),
            duration=str(data["duration"]),
            icon_name=data.get("iconName"),
            is_default=bool(data.get("isDefault", False)),
        )


def encode_records(records: List[Any]) -> bytes:
    """Encode a list of records into a JSON blob"""
    return json.dumps([record.to_dict() for record in records], indent=2).encode("utf-8")


def decode_records(blob: bytes, from_dict: Callable[[Dict[str, Any]], T]) -> List[T]:
    """Decode a JSON blob into records.

    Raises ValueError (or a subclass) on malformed input so callers can treat
    the whole blob as missing.
    """
    data = json.loads(blob.decode("utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of records, got {type(data).__name__}")
    try:
        return [from_dict(item) for item in data]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed record: {e}") from e


def encode_record(record: Any) -> bytes:
    return json.dumps(record.to_dict(), indent=2).encode("utf-8")


def decode_record(blob: bytes, from_dict: Callable[[Dict[str, Any]], T]) -> T:
    data = json.loads(blob.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a record object, got {type(data).__name__}")
    try:
        return from_dict(data)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed record: {e}") from e
