from __future__ import annotations

import pytest

from persistent_storage import InMemoryStorage
from records import TrainingProgram
from training_programs import ALL_LEVELS, TrainingCatalog, default_trainings, duration_seconds


class ReadOnlyStorage(InMemoryStorage):
    def write(self, key: str, blob: bytes) -> bool:
        return False


def test_catalog_starts_with_built_in_programs(storage) -> None:
    catalog = TrainingCatalog(storage)

    programs = catalog.load()

    assert [program.name for program in programs] == ["Speed", "Strength", "Ball Control"]
    assert all(program.is_default for program in programs)
    assert catalog.user_programs() == []


def test_add_training_appends_and_persists(storage) -> None:
    catalog = TrainingCatalog(storage)
    catalog.load()

    program = catalog.add_training("  Sprints ", level="Advanced", goal="Speed", duration="30 min")

    assert program.name == "Sprints"
    assert program.description == "No description"
    assert program.icon_name == "speedIcon"
    assert not program.is_default
    assert catalog.programs[-1] == program
    assert storage.load_saved_trainings() == [program]
    assert [p.name for p in TrainingCatalog(storage).load()][-1] == "Sprints"


@pytest.mark.parametrize("kwargs", [
    {"name": "   "},
    {"name": "Drills", "level": "Expert"},
    {"name": "Drills", "duration": "90 min"},
])
def test_add_training_validates_input(storage, kwargs) -> None:
    catalog = TrainingCatalog(storage)
    catalog.load()

    with pytest.raises(ValueError):
        catalog.add_training(**kwargs)

    assert storage.load_saved_trainings() == []


def test_add_training_reports_failed_save() -> None:
    catalog = TrainingCatalog(ReadOnlyStorage())
    catalog.load()

    with pytest.raises(OSError):
        catalog.add_training("Drills")

    assert catalog.user_programs() == []


def test_filter_by_search_and_level(storage) -> None:
    catalog = TrainingCatalog(storage)
    catalog.load()
    catalog.add_training("Speed Ladder", level="Beginner", duration="30 min")

    assert [p.name for p in catalog.filtered("speed")] == ["Speed", "Speed Ladder"]
    assert [p.name for p in catalog.filtered("speed", "Beginner")] == ["Speed Ladder"]
    assert [p.name for p in catalog.filtered(level="Advanced")] == ["Strength"]
    assert len(catalog.filtered("", ALL_LEVELS)) == 4


def test_duration_seconds_falls_back_to_thirty_minutes() -> None:
    speed = default_trainings()[0]

    assert duration_seconds(speed) == 45 * 60
    assert duration_seconds(TrainingProgram("x", "", "Beginner", "long")) == 30 * 60


def test_reset_handler_restores_built_ins(storage) -> None:
    catalog = TrainingCatalog(storage)
    catalog.load()
    catalog.add_training("Drills")

    catalog.on_data_reset()

    assert [program.id for program in catalog.programs] == [p.id for p in default_trainings()]
