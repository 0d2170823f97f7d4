#!/usr/bin/env python3
"""
Hydration Status Utility - Check today's hydration timeline without starting the app
"""

import argparse
from pathlib import Path

from dotenv import load_dotenv

from config import load_config
from hydration_engine import format_time_remaining, next_reminder, slots_for_day, total_consumed
from persistent_storage import PersistentStorage
from time_service import time_service

STATUS_ICONS = {
    'completed': "✅ DONE",
    'overdue': "⚠️  OVERDUE",
    'active': "🟢 ACTIVE",
    'upcoming': "⏳ UPCOMING",
}


def main(argv=None):
    load_dotenv()
    config = load_config()

    parser = argparse.ArgumentParser(description="Show today's hydration timeline")
    parser.add_argument('--data-dir', default=config.data_dir,
                        help=f'Directory holding the stored data (default: {config.data_dir})')
    args = parser.parse_args(argv)

    if not Path(args.data_dir).exists():
        print("❌ Data directory not found. Has the app been started?")
        return

    storage = PersistentStorage(args.data_dir)
    now = time_service.now()
    slots = sorted(slots_for_day(storage.load_hydration_slots(), now), key=lambda slot: slot.scheduled_time)
    settings = storage.load_hydration_settings()

    print("💧 GOALFUEL - HYDRATION STATUS")
    print("=" * 40)
    print(f"📅 Local Time: {now.strftime('%Y-%m-%d %H:%M:%S')}")

    if not slots:
        print("\nNo hydration entries for today yet.")
        return

    print(f"🥤 Consumed: {total_consumed(slots):.1f}L / {settings.daily_goal_liters:.1f}L")

    upcoming = next_reminder(slots, now)
    if upcoming:
        print(f"🔔 Next Reminder: {upcoming.strftime('%H:%M')} ({format_time_remaining(upcoming, now)})")
    else:
        print("🔔 Next Reminder: No upcoming reminders")

    print("\n⏰ TODAY'S TIMELINE:")
    print("-" * 40)
    for slot in slots:
        status = slot.status(now, config.policy.overdue_minutes)
        print(f"   {slot.scheduled_time.strftime('%H:%M')}  {slot.amount:>6}  {STATUS_ICONS[status]}")


if __name__ == "__main__":
    main()
