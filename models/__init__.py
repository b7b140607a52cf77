from models.teacher import Teacher
from models.room import Room
from models.subject import Subject, SubjectType
from models.course_offering import CourseOffering
from models.semester_offering import SemesterOffering, Programme, Department, Session
from models.schedule import (
    RunStatus,
    ScheduleEntry,
    ScheduleRun,
    GenerationReport,
    PlacementSuggestion,
)
from models.reference_data import ReferenceData
from models.timeslot import TimeSlot, TimeGrid

__all__ = [
    "Teacher",
    "Room",
    "Subject",
    "SubjectType",
    "CourseOffering",
    "SemesterOffering",
    "Programme",
    "Department",
    "Session",
    "RunStatus",
    "ScheduleEntry",
    "ScheduleRun",
    "GenerationReport",
    "PlacementSuggestion",
    "ReferenceData",
    "TimeSlot",
    "TimeGrid",
]
