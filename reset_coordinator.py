from event_manager import DATA_RESET, Event, EventManager
from persistent_storage import DOMAIN_KEYS, ONBOARDING_COMPLETED_KEY, PersistentStorage


class ResetCoordinator:
    """Wipes every persisted domain record and tells open views to start over"""

    def __init__(self, storage: PersistentStorage, event_manager: EventManager):
        self.storage = storage
        self.event_manager = event_manager

    def reset_all(self, include_onboarding: bool = False) -> Event:
        for key in DOMAIN_KEYS:
            self.storage.delete(key)
        if include_onboarding:
            self.storage.delete(ONBOARDING_COMPLETED_KEY)

        print("🔄 All data has been reset successfully")
        return self.event_manager.trigger_event(DATA_RESET, {'include_onboarding': include_onboarding})
