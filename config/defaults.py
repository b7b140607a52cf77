from config.schema import (
    ApiConfig,
    ClientConfig,
    LessonSlot,
    PauseSlot,
    TimeGridConfig,
)


def default_time_grid() -> TimeGridConfig:
    """Festes Wochenraster der Universität.

    Slot-Raster (Montag bis Samstag):
    1. Slot  09:00 - 09:55
    2. Slot  09:55 - 10:50
    3. Slot  10:50 - 11:45
    4. Slot  11:45 - 12:40
       ── Lunch Break 12:40 - 13:50 ──
    5. Slot  13:50 - 14:45
    6. Slot  14:45 - 15:40
    7. Slot  15:40 - 16:35

    Slots 1-4 vormittags, 5-7 nachmittags. Die Mittagspause ist nie buchbar.
    """
    return TimeGridConfig(
        day_names=("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"),
        lesson_slots=(
            LessonSlot(slot_number=1, start_time="09:00", end_time="09:55"),
            LessonSlot(slot_number=2, start_time="09:55", end_time="10:50"),
            LessonSlot(slot_number=3, start_time="10:50", end_time="11:45"),
            LessonSlot(slot_number=4, start_time="11:45", end_time="12:40"),
            LessonSlot(slot_number=5, start_time="13:50", end_time="14:45"),
            LessonSlot(slot_number=6, start_time="14:45", end_time="15:40"),
            LessonSlot(slot_number=7, start_time="15:40", end_time="16:35"),
        ),
        pauses=(
            PauseSlot(after_slot=4, start_time="12:40", end_time="13:50",
                      label="Lunch Break"),
        ),
    )


def default_client_config() -> ClientConfig:
    """Standard-Konfiguration für einen lokal laufenden Server."""
    return ClientConfig(
        institution_name="University",
        time_grid=default_time_grid(),
        api=ApiConfig(),
    )
