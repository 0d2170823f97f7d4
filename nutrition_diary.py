from datetime import datetime
from typing import Callable, Dict, List, Optional

from event_manager import Event
from persistent_storage import PersistentStorage
from records import MealEntry, parse_labeled_quantity

MEAL_TYPES = ["Breakfast", "Lunch", "Dinner", "Snacks"]
FOOD_NAME_PLACEHOLDER = "Food name"
DAILY_CALORIE_GOAL = 2800


class MealDiary:
    def __init__(self, storage: PersistentStorage, clock: Optional[Callable[[], datetime]] = None):
        self.storage = storage
        self._clock = clock or (lambda: datetime.now().astimezone())
        self.entries: List[MealEntry] = []

    def load(self) -> List[MealEntry]:
        self.entries = self.storage.load_meal_entries()
        return self.entries

    def add_meal(self, meal_type: str, calories: str, food_name: str,
                 protein: str = "0g", carbs: str = "0g", fats: str = "0g") -> MealEntry:
        if meal_type not in MEAL_TYPES:
            raise ValueError(f"Unknown meal type: {meal_type}")

        food_name = food_name.strip()
        entry = MealEntry(
            meal_type=meal_type,
            time=self._clock().strftime("%I:%M %p"),
            calories=calories,
            food_name=food_name if food_name and food_name != FOOD_NAME_PLACEHOLDER else "Unnamed meal",
            protein=protein,
            carbs=carbs,
            fats=fats,
        )
        self.entries.append(entry)
        self.storage.save_meal_entries(self.entries)
        return entry

    def grouped(self) -> Dict[str, List[MealEntry]]:
        """Entries grouped by meal type, keys in sorted order"""
        groups: Dict[str, List[MealEntry]] = {}
        for entry in self.entries:
            groups.setdefault(entry.meal_type, []).append(entry)
        return {meal_type: groups[meal_type] for meal_type in sorted(groups)}

    def totals(self) -> Dict[str, float]:
        return {
            'calories': sum(parse_labeled_quantity(entry.calories) for entry in self.entries),
            'protein': sum(parse_labeled_quantity(entry.protein) for entry in self.entries),
            'carbs': sum(parse_labeled_quantity(entry.carbs) for entry in self.entries),
            'fats': sum(parse_labeled_quantity(entry.fats) for entry in self.entries),
        }

    def calorie_progress(self) -> float:
        return min(1.0, self.totals()['calories'] / DAILY_CALORIE_GOAL)

    def on_data_reset(self, event: Optional[Event] = None):
        self.entries = []
