# importa todos os models pra registrar as tabelas no Base.metadata
from escola.models.user import User
from escola.models.teacher import Teacher, TeacherSubject
from escola.models.subject import Subject
from escola.models.school_class import SchoolClass
from escola.models.student import Student, Enrollment
from escola.models.schedule import ScheduleEntry
from escola.models.grade import GradingPeriod, Grade
from escola.models.calendar_event import CalendarEvent

__all__ = [
    "User",
    "Teacher",
    "TeacherSubject",
    "Subject",
    "SchoolClass",
    "Student",
    "Enrollment",
    "ScheduleEntry",
    "GradingPeriod",
    "Grade",
    "CalendarEvent",
]
