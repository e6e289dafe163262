"""
Model registry.

Importing this module registers every table on ``Base.metadata`` and lets
string relationships resolve. Used by migrations and scripts that do not go
through the application routers.
"""

from edutrack.modules.academics.models import AcademicYear, Grade, Lesson, Subject, Term
from edutrack.modules.attendance.models import Attendance
from edutrack.modules.classes.models import SchoolClass
from edutrack.modules.curriculum.models import (
    Curriculum,
    CurriculumSubject,
    LearningObjective,
    StudentProgress,
)
from edutrack.modules.events.models import Event, EventRSVP
from edutrack.modules.fees.models import FeeBreakdownItem, FeeOverride, FeeStructure
from edutrack.modules.materials.models import Cart, CartItem, Material, MaterialCategory
from edutrack.modules.notifications.models import Notification
from edutrack.modules.orders.models import MaterialOrder, OrderItem
from edutrack.modules.parents.models import Parent
from edutrack.modules.payments.models import OrderPayment, SchoolPaymentAccount
from edutrack.modules.report_cards.models import ReportCard, SubjectReport
from edutrack.modules.rooms.models import Room
from edutrack.modules.schools.models import School
from edutrack.modules.students.models import Student
from edutrack.modules.teachers.models import Teacher
from edutrack.modules.timetables.models import Timetable, TimetableSlot
from edutrack.modules.users.models import User

__all__ = [
    "AcademicYear",
    "Attendance",
    "Cart",
    "CartItem",
    "Curriculum",
    "CurriculumSubject",
    "Event",
    "EventRSVP",
    "FeeBreakdownItem",
    "FeeOverride",
    "FeeStructure",
    "Grade",
    "LearningObjective",
    "Lesson",
    "Material",
    "MaterialCategory",
    "MaterialOrder",
    "Notification",
    "OrderItem",
    "OrderPayment",
    "Parent",
    "ReportCard",
    "Room",
    "School",
    "SchoolClass",
    "SchoolPaymentAccount",
    "Student",
    "StudentProgress",
    "Subject",
    "SubjectReport",
    "Teacher",
    "Term",
    "Timetable",
    "TimetableSlot",
    "User",
]
