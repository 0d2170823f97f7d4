import asyncio
from typing import Callable, List, Set

from dotenv import load_dotenv
from nicegui import app, ui, Client

from audio_service import AudioService
from config import load_config
from countdown_timer import CountdownTimer
from event_manager import DATA_RESET, EventManager
from hydration_engine import HydrationEngine, TooEarly, format_time_remaining
from nutrition_diary import DAILY_CALORIE_GOAL, FOOD_NAME_PLACEHOLDER, MEAL_TYPES, MealDiary
from persistent_storage import PersistentStorage
from records import HydrationSettings
from reminder_scheduler import AsyncioNotificationCenter, ReminderScheduler, ScheduledNotification
from reset_coordinator import ResetCoordinator
from time_service import time_service
from training_programs import (
    ALL_LEVELS, DURATIONS, GOAL_ICONS, LEVELS, TrainingCatalog, duration_seconds,
)

# Load environment variables
load_dotenv()

REMINDER_LEAD_OPTIONS = {5: '5 min', 15: '15 min', 0: 'in time'}
STATUS_BADGES = {
    'completed': ('✅ Done', 'positive'),
    'overdue': ('⚠️ Overdue', 'negative'),
    'active': ('💧 Now', 'primary'),
    'upcoming': ('⏳ Later', 'grey'),
}


class GoalFuelApp:
    def __init__(self):
        self.config = load_config()
        self.storage = PersistentStorage(self.config.data_dir)
        self.event_manager = EventManager(clock=time_service.now)
        self.reset_coordinator = ResetCoordinator(self.storage, self.event_manager)
        self.audio_service = AudioService(self.config.audio_dir)

        self.notification_center = AsyncioNotificationCenter(
            deliver=self._deliver_notification,
            permission_granted=self.config.notifications_enabled,
            clock=time_service.now,
            audio=self.audio_service,
        )
        self.reminder_scheduler = ReminderScheduler(self.notification_center)

        # Connected browser clients that can show reminder toasts
        self.clients: Set[Client] = set()

        print(f"💧 GoalFuel configured: data in '{self.config.data_dir}', "
              f"notifications {'on' if self.config.notifications_enabled else 'off'}")

    def _deliver_notification(self, notification: ScheduledNotification):
        for client in list(self.clients):
            with client:
                ui.notify(f"{notification.title}: {notification.body}", type='info',
                          position='top-right', timeout=10000, close_button=True)

    def create_ui(self):
        """Create the main UI for one browser client"""
        ui.page_title('GoalFuel')

        if not self.storage.is_onboarding_completed():
            self._create_onboarding()
            return

        client = ui.context.client
        self.clients.add(client)

        hydration = HydrationEngine(
            self.storage,
            scheduler=self.reminder_scheduler,
            policy=self.config.policy,
            clock=time_service.now,
        )
        diary = MealDiary(self.storage, clock=time_service.now)
        catalog = TrainingCatalog(self.storage)
        countdown = {'timer': CountdownTimer(60 * 60)}

        hydration.load()
        diary.load()
        catalog.load()

        refreshers: List[Callable[[], None]] = []

        with ui.tabs().classes('w-full') as tabs:
            training_tab = ui.tab('Training', icon='fitness_center')
            timer_tab = ui.tab('Timer', icon='timer')
            hydration_tab = ui.tab('Hydration', icon='water_drop')
            nutrition_tab = ui.tab('Nutrition', icon='restaurant')
            profile_tab = ui.tab('Profile', icon='person')

        def training_finished():
            # Fired from the tick task, outside any UI slot
            with client:
                ui.notify('🏁 Training complete!', type='positive')

        def start_training(seconds: int):
            asyncio.create_task(countdown['timer'].stop())
            countdown['timer'] = CountdownTimer(seconds, on_finished=training_finished)
            countdown['timer'].start()
            tabs.set_value(timer_tab)

        with ui.tab_panels(tabs, value=hydration_tab).classes('w-full max-w-3xl mx-auto'):
            with ui.tab_panel(training_tab):
                refreshers.append(self._create_training_panel(catalog, start_training))
            with ui.tab_panel(timer_tab):
                self._create_timer_panel(countdown, start_training)
            with ui.tab_panel(hydration_tab):
                refreshers.append(self._create_hydration_panel(hydration))
            with ui.tab_panel(nutrition_tab):
                refreshers.append(self._create_nutrition_panel(diary))
            with ui.tab_panel(profile_tab):
                refreshers.append(self._create_profile_panel(hydration, diary))

        def on_data_reset(event):
            for refresh in refreshers:
                refresh()

        unsubscribers = [
            self.event_manager.subscribe(DATA_RESET, hydration.on_data_reset),
            self.event_manager.subscribe(DATA_RESET, diary.on_data_reset),
            self.event_manager.subscribe(DATA_RESET, catalog.on_data_reset),
            self.event_manager.subscribe(DATA_RESET, on_data_reset),
        ]

        async def on_disconnect():
            for unsubscribe in unsubscribers:
                unsubscribe()
            self.clients.discard(client)
            self.reminder_scheduler.cancel_pending_request(owner=hydration)
            await countdown['timer'].stop()
            print("Info: client disconnected, view subscriptions removed")

        client.on_disconnect(on_disconnect)
        print("Info: UI elements created")

    def _create_onboarding(self):
        with ui.card().classes('w-full max-w-xl mx-auto p-6 items-center'):
            ui.label('⚽ Welcome to GoalFuel').classes('text-3xl font-bold text-center mb-4')
            ui.label('Train with structured programs, stay hydrated with timed reminders '
                     'and keep a simple nutrition diary.').classes('text-center mb-6')

            def finish():
                self.storage.set_onboarding_completed(True)
                ui.navigate.to('/')

            ui.button('Get Started', on_click=finish).classes('w-full')

    def _create_training_panel(self, catalog: TrainingCatalog, start_training) -> Callable[[], None]:
        filters = {'search': '', 'level': ALL_LEVELS}

        ui.label('🏋️ Training Programs').classes('text-2xl font-bold mb-4')
        with ui.row().classes('w-full gap-2 items-center'):
            ui.input('Search programs', on_change=lambda e: (filters.update(search=e.value or ''), program_list.refresh())).classes('flex-1')
            ui.toggle([ALL_LEVELS] + LEVELS, value=ALL_LEVELS,
                      on_change=lambda e: (filters.update(level=e.value), program_list.refresh()))

        @ui.refreshable
        def program_list():
            programs = catalog.filtered(filters['search'], filters['level'])
            if not programs:
                ui.label('No programs found').classes('text-gray-500')
            for program in programs:
                with ui.card().classes('w-full mb-2'):
                    with ui.row().classes('w-full items-center'):
                        with ui.column().classes('flex-1 gap-0'):
                            ui.label(f'{program.level} · {program.duration}').classes('text-xs text-gray-500')
                            ui.label(program.name).classes('text-lg font-semibold')
                            ui.label(program.description).classes('text-sm text-gray-600')
                        ui.button(icon='play_arrow',
                                  on_click=lambda p=program: start_training(duration_seconds(p))).props('round')

        program_list()

        with ui.expansion('➕ Create Training', icon='add').classes('w-full mt-4'):
            name_input = ui.input('Training name')
            description_input = ui.textarea('Description')
            level_select = ui.select(LEVELS, value='Intermediate', label='Level')
            goal_select = ui.select(list(GOAL_ICONS), value='Agility', label='Goal')
            duration_select = ui.select(DURATIONS, value='45 min', label='Duration')

            def save_training():
                try:
                    catalog.add_training(
                        name_input.value or '',
                        description_input.value or '',
                        level_select.value,
                        goal_select.value,
                        duration_select.value,
                    )
                except (ValueError, OSError) as e:
                    ui.notify(str(e), type='warning')
                    return
                ui.notify('Your training has been successfully saved', type='positive')
                name_input.value = ''
                description_input.value = ''
                program_list.refresh()

            ui.button('Save', icon='check', on_click=save_training).classes('w-full mt-2')

        return program_list.refresh

    def _create_timer_panel(self, countdown: dict, start_training):
        ui.label('⏱️ Timer').classes('text-2xl font-bold mb-4')
        minutes_input = ui.number('Duration (minutes)', value=60, min=1, max=180, step=5)

        with ui.card().classes('w-full items-center p-8 my-4'):
            ui.label('Total Training Time').classes('text-sm text-gray-500')
            time_label = ui.label(countdown['timer'].formatted_time).classes('text-5xl font-bold font-mono')

        with ui.row().classes('w-full gap-2'):
            ui.button('Start', icon='play_arrow',
                      on_click=lambda: start_training(int(minutes_input.value or 1) * 60)).classes('flex-1')
            pause_button = ui.button('Pause', icon='pause',
                                     on_click=lambda: countdown['timer'].toggle_pause()).classes('flex-1')
            ui.button('Cancel', icon='stop',
                      on_click=lambda: asyncio.create_task(countdown['timer'].stop())).classes('flex-1 bg-red-500')

        def update_timer():
            timer = countdown['timer']
            time_label.text = timer.formatted_time
            pause_button.text = 'Resume' if timer.is_paused else 'Pause'

        ui.timer(1.0, update_timer)

    def _create_hydration_panel(self, hydration: HydrationEngine) -> Callable[[], None]:
        ui.label('💧 Hydration Tracking').classes('text-2xl font-bold mb-4')

        @ui.refreshable
        def progress():
            with ui.card().classes('w-full mb-4'):
                with ui.row().classes('w-full items-center'):
                    with ui.column().classes('flex-1 gap-0'):
                        ui.label(f'{hydration.total_consumed:.1f}L / {hydration.settings.daily_goal_liters:.1f}L').classes('text-2xl font-bold')
                        ui.label('Daily Goal').classes('text-sm text-gray-500')
                    ui.button(icon='local_drink', on_click=add_water).props('round size=lg')
                ui.linear_progress(value=hydration.progress(), show_value=False).classes('mt-2')

        @ui.refreshable
        def timeline():
            ui.label("Today's Timeline").classes('text-lg font-semibold mt-2')
            now = time_service.now()
            slots = hydration.timeline()
            if not slots:
                ui.label('No Hydration Entries').classes('text-gray-500')
            for slot in slots:
                status = hydration.slot_status(slot, now)
                badge_text, badge_color = STATUS_BADGES[status]
                with ui.row().classes('w-full items-center py-1'):
                    ui.label(f'{slot.amount} Water').classes('flex-1 font-medium')
                    ui.label(slot.scheduled_time.strftime('%H:%M')).classes('w-16 font-mono')
                    ui.badge(badge_text, color=badge_color)
                    if status in ('active', 'overdue'):
                        ui.button('Drink', on_click=lambda s=slot: mark_complete(s.id)).props('flat size=sm')

        def refresh():
            progress.refresh()
            timeline.refresh()

        def add_water():
            outcome = hydration.add_water()
            if isinstance(outcome, TooEarly):
                ui.notify(f'Not Time Yet. {outcome.message}', type='warning')
            else:
                ui.notify(f'+{outcome.slot.amount} logged', type='positive')
            # add_water re-reads storage, so the view may change either way
            refresh()

        def mark_complete(slot_id: str):
            hydration.mark_complete(slot_id)
            refresh()

        progress()

        with ui.card().classes('w-full mb-4'):
            with ui.row().classes('w-full items-center'):
                with ui.column().classes('flex-1 gap-0'):
                    ui.label('Next Reminder').classes('text-lg font-semibold')
                    next_label = ui.label()
                ui.icon('notifications')

        def update_next_reminder():
            if hydration.next_reminder_time is None:
                next_label.text = 'No upcoming reminders'
            else:
                next_label.text = format_time_remaining(hydration.next_reminder_time, time_service.now())

        update_next_reminder()
        ui.timer(1.0, update_next_reminder)

        timeline()

        def sync_with_storage():
            # Status moves with the clock; other tabs and midnight change the slots
            hydration.sync()
            refresh()
            update_next_reminder()

        ui.timer(60.0, sync_with_storage)

        with ui.expansion('🔔 Reminders', icon='settings').classes('w-full mt-4'):
            lead_toggle = ui.toggle(REMINDER_LEAD_OPTIONS, value=hydration.settings.reminder_lead_minutes)
            sound_switch = ui.switch('Sound Notifications', value=hydration.settings.sound_enabled)
            vibration_switch = ui.switch('Vibration', value=hydration.settings.vibration_enabled)

            def save_settings():
                hydration.save_settings(HydrationSettings(
                    daily_goal_liters=hydration.settings.daily_goal_liters,
                    reminder_lead_minutes=lead_toggle.value,
                    sound_enabled=sound_switch.value,
                    vibration_enabled=vibration_switch.value,
                ))
                ui.notify('Reminder settings saved', type='positive')

            ui.button('Save', icon='check', on_click=save_settings).classes('w-full mt-2')

        def reset_controls():
            lead_toggle.value = hydration.settings.reminder_lead_minutes
            sound_switch.value = hydration.settings.sound_enabled
            vibration_switch.value = hydration.settings.vibration_enabled
            refresh()
            update_next_reminder()

        return reset_controls

    def _create_nutrition_panel(self, diary: MealDiary) -> Callable[[], None]:
        ui.label('🍽️ Nutrition').classes('text-2xl font-bold mb-4')

        @ui.refreshable
        def summary():
            totals = diary.totals()
            with ui.card().classes('w-full mb-4'):
                with ui.row().classes('w-full'):
                    ui.label('Daily Goal').classes('flex-1 text-gray-500')
                    ui.label(f"{totals['calories']:.0f} / {DAILY_CALORIE_GOAL} kcal")
                ui.linear_progress(value=diary.calorie_progress(), show_value=False)
                with ui.row().classes('w-full justify-between'):
                    ui.label(f"Protein {totals['protein']:.0f}g")
                    ui.label(f"Carbs {totals['carbs']:.0f}g")
                    ui.label(f"Fats {totals['fats']:.0f}g")

            groups = diary.grouped()
            if not groups:
                ui.label('No meals logged yet').classes('text-gray-500')
            for meal_type, entries in groups.items():
                ui.label(meal_type).classes('text-lg font-semibold mt-2')
                for entry in entries:
                    with ui.row().classes('w-full'):
                        ui.label(entry.food_name).classes('flex-1')
                        ui.label(entry.time).classes('w-24 text-gray-500')
                        ui.label(f'{entry.calories} kcal').classes('w-24 text-right')

        summary()

        with ui.expansion('➕ Add Meal', icon='add').classes('w-full mt-4'):
            meal_type_select = ui.select(MEAL_TYPES, value='Breakfast', label='Meal type')
            food_input = ui.input('Food', value=FOOD_NAME_PLACEHOLDER)
            calories_input = ui.input('Calories', value='0')
            with ui.row().classes('w-full gap-2'):
                protein_input = ui.input('Protein', value='0g').classes('flex-1')
                carbs_input = ui.input('Carbs', value='0g').classes('flex-1')
                fats_input = ui.input('Fats', value='0g').classes('flex-1')

            def save_meal():
                try:
                    diary.add_meal(
                        meal_type_select.value,
                        calories_input.value or '0',
                        food_input.value or '',
                        protein_input.value or '0g',
                        carbs_input.value or '0g',
                        fats_input.value or '0g',
                    )
                except ValueError as e:
                    ui.notify(str(e), type='warning')
                    return
                ui.notify('Meal saved', type='positive')
                summary.refresh()

            ui.button('Save', icon='check', on_click=save_meal).classes('w-full mt-2')

        return summary.refresh

    def _create_profile_panel(self, hydration: HydrationEngine, diary: MealDiary) -> Callable[[], None]:
        ui.label('👤 Profile').classes('text-2xl font-bold mb-4')

        @ui.refreshable
        def stats():
            with ui.row().classes('w-full gap-4'):
                with ui.card().classes('flex-1'):
                    ui.label('💧 Water balance').classes('text-sm text-gray-500')
                    ui.label(f'{hydration.total_consumed:.1f}L today').classes('text-xl font-bold')
                with ui.card().classes('flex-1'):
                    ui.label('🍴 Daily meal').classes('text-sm text-gray-500')
                    ui.label(f"{diary.totals()['calories']:.0f} kcal").classes('text-xl font-bold')

        stats()

        with ui.dialog() as confirm_dialog, ui.card():
            ui.label('Reset All Data?').classes('text-lg font-bold')
            ui.label('This will delete all your hydration and nutrition records. '
                     'This action cannot be undone.')
            with ui.row().classes('w-full justify-end'):
                ui.button('Cancel', on_click=confirm_dialog.close).props('flat')

                def confirm_reset():
                    confirm_dialog.close()
                    self.reset_coordinator.reset_all()
                    ui.notify('All data has been reset successfully', type='positive')

                ui.button('Reset', on_click=confirm_reset).classes('bg-red-600')

        ui.button('Reset data', icon='delete', on_click=confirm_dialog.open).classes('w-full mt-6 bg-red-600')

        return stats.refresh


# Global app instance
goalfuel_app = GoalFuelApp()


@ui.page('/')
async def index():
    goalfuel_app.create_ui()


# Startup and shutdown handlers
async def on_startup():
    """App startup handler"""
    if goalfuel_app.config.time_sync_enabled:
        await time_service.ensure_time_sync()
    print("✅ GoalFuel started")


async def on_shutdown():
    """App shutdown handler"""
    goalfuel_app.notification_center.cancel_all()
    print("App shutdown complete")

app.on_startup(on_startup)
app.on_shutdown(on_shutdown)

if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='GoalFuel',
        port=goalfuel_app.config.port,
        show=True,
        reload=False
    )
