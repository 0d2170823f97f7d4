#!/usr/bin/env python3
"""
GoalFuel Data Reset Utility

This script wipes the app's hydration, nutrition and training data from the
command line. A running app picks the change up on its next load.
"""

import sys
import argparse
from pathlib import Path

from event_manager import EventManager
from persistent_storage import PersistentStorage
from reset_coordinator import ResetCoordinator


def main(argv=None):
    parser = argparse.ArgumentParser(description='Reset GoalFuel app data')
    parser.add_argument('--data-dir', default='data',
                        help='Directory holding the stored data (default: data)')
    parser.add_argument('--include-onboarding', action='store_true',
                        help='Also forget that onboarding was completed')
    parser.add_argument('--confirm', action='store_true',
                        help='Skip confirmation prompt')

    args = parser.parse_args(argv)

    # Check if data directory exists
    if not Path(args.data_dir).exists():
        print("❌ Data directory not found. No data to reset.")
        return

    storage = PersistentStorage(args.data_dir)

    # Show current data before reset
    slots = storage.load_hydration_slots()
    print("📊 Current Data:")
    print(f"   Hydration entries: {len(slots)} ({sum(1 for slot in slots if slot.is_completed)} completed)")
    print(f"   Meal entries: {len(storage.load_meal_entries())}")
    print(f"   Saved trainings: {len(storage.load_saved_trainings())}")

    # Confirm reset
    if not args.confirm:
        confirm = input("\n🔄 Reset all data? This cannot be undone. (y/N): ").lower().strip()
        if confirm != 'y':
            print("Reset cancelled.")
            return

    try:
        ResetCoordinator(storage, EventManager()).reset_all(include_onboarding=args.include_onboarding)
    except OSError as e:
        print(f"❌ Error during reset: {e}")
        sys.exit(1)

    print("\n💡 You can now restart the app with clean data.")


if __name__ == "__main__":
    main()
