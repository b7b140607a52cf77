from routine.client import RoutineClient
from routine.lifecycle import ScheduleRunController
from routine.store import ScheduleEntryStore

__all__ = ["RoutineClient", "ScheduleRunController", "ScheduleEntryStore"]
