import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class HydrationPolicy:
    """Time-window thresholds for the add-water action and slot status"""
    too_early_minutes: int = 5
    match_window_minutes: int = 30
    overdue_minutes: int = 60


@dataclass(frozen=True)
class AppConfig:
    data_dir: str = "data"
    audio_dir: str = "data/audio"
    port: int = 8080
    notifications_enabled: bool = True
    time_sync_enabled: bool = True
    policy: HydrationPolicy = HydrationPolicy()


def load_config() -> AppConfig:
    """Build the configuration from environment variables (.env is loaded by the caller)"""
    data_dir = os.getenv('DATA_DIR', 'data')
    return AppConfig(
        data_dir=data_dir,
        audio_dir=os.getenv('AUDIO_DIR', os.path.join(data_dir, 'audio')),
        port=int(os.getenv('PORT', 8080)),
        notifications_enabled=_env_bool('NOTIFICATIONS_ENABLED', True),
        time_sync_enabled=_env_bool('TIME_SYNC_ENABLED', True),
        policy=HydrationPolicy(
            too_early_minutes=int(os.getenv('TOO_EARLY_MINUTES', 5)),
            match_window_minutes=int(os.getenv('MATCH_WINDOW_MINUTES', 30)),
            overdue_minutes=int(os.getenv('OVERDUE_MINUTES', 60)),
        ),
    )
