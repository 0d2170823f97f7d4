from typing import List, Optional

from event_manager import Event
from persistent_storage import PersistentStorage
from records import TrainingProgram

ALL_LEVELS = "All Levels"
LEVELS = ["Beginner", "Intermediate", "Advanced"]
DURATIONS = ["30 min", "45 min", "60 min"]
GOAL_ICONS = {
    "Speed": "speedIcon",
    "Strength": "strengthIcon",
    "Agility": "agilityIcon",
    "Ball Control": "ballIcon",
}
DEFAULT_DURATION_SECONDS = 30 * 60


def default_trainings() -> List[TrainingProgram]:
    return [
        TrainingProgram(
            id="default-speed",
            name="Speed",
            description="Enhance your quick movements and reactions",
            level="Intermediate",
            duration="45 min",
            icon_name="speedIcon",
            is_default=True,
        ),
        TrainingProgram(
            id="default-strength",
            name="Strength",
            description="Become strong and success will be with you.",
            level="Advanced",
            duration="60 min",
            icon_name="strengthIcon",
            is_default=True,
        ),
        TrainingProgram(
            id="default-ball-control",
            name="Ball Control",
            description="Master fundamental ball control techniques",
            level="Beginner",
            duration="30 min",
            icon_name="ballIcon",
            is_default=True,
        ),
    ]


def duration_seconds(program: TrainingProgram) -> int:
    """Seconds for a '45 min' style duration, 30 minutes when unparseable"""
    head = program.duration.split(" ")[0]
    try:
        return int(head) * 60
    except ValueError:
        return DEFAULT_DURATION_SECONDS


class TrainingCatalog:
    """Built-in programs followed by the ones the user created"""

    def __init__(self, storage: PersistentStorage):
        self.storage = storage
        self.programs: List[TrainingProgram] = []

    def load(self) -> List[TrainingProgram]:
        self.programs = default_trainings() + self.storage.load_saved_trainings()
        return self.programs

    def filtered(self, search_text: str = "", level: str = ALL_LEVELS) -> List[TrainingProgram]:
        needle = search_text.strip().lower()
        return [
            program for program in self.programs
            if (level == ALL_LEVELS or program.level == level)
            and (not needle or needle in program.name.lower())
        ]

    def add_training(self, name: str, description: str = "", level: str = "Intermediate",
                     goal: str = "Agility", duration: str = "45 min") -> TrainingProgram:
        name = name.strip()
        if not name:
            raise ValueError("Please enter a training name")
        if level not in LEVELS:
            raise ValueError(f"Unknown level: {level}")
        if duration not in DURATIONS:
            raise ValueError(f"Unknown duration: {duration}")

        program = TrainingProgram(
            name=name,
            description=description.strip() or "No description",
            level=level,
            duration=duration,
            icon_name=GOAL_ICONS.get(goal),
        )
        saved = self.storage.load_saved_trainings()
        saved.append(program)
        if not self.storage.save_saved_trainings(saved):
            raise OSError("Failed to save training")

        self.programs.append(program)
        return program

    def user_programs(self) -> List[TrainingProgram]:
        return [program for program in self.programs if not program.is_default]

    def on_data_reset(self, event: Optional[Event] = None):
        self.programs = default_trainings()
