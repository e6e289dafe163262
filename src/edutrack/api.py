from fastapi import APIRouter

from edutrack.modules.academics.router import router as academics_router
from edutrack.modules.attendance.router import router as attendance_router
from edutrack.modules.auth.router import router as auth_router
from edutrack.modules.classes.router import router as classes_router
from edutrack.modules.curriculum.router import router as curriculum_router
from edutrack.modules.events.router import router as events_router
from edutrack.modules.fees.router import router as fees_router
from edutrack.modules.materials.router import cart_router
from edutrack.modules.materials.router import router as materials_router
from edutrack.modules.notifications.router import router as notifications_router
from edutrack.modules.orders.router import router as orders_router
from edutrack.modules.parents.router import router as parents_router
from edutrack.modules.payments.router import router as payments_router
from edutrack.modules.report_cards.router import router as report_cards_router
from edutrack.modules.rooms.router import router as rooms_router
from edutrack.modules.schools.router import router as schools_router
from edutrack.modules.students.router import router as students_router
from edutrack.modules.teachers.router import router as teachers_router
from edutrack.modules.timetables.router import router as timetables_router
from edutrack.modules.users.router import router as users_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(schools_router, prefix="/schools", tags=["Schools"])
api_router.include_router(academics_router, prefix="/academics", tags=["Academics"])
api_router.include_router(classes_router, prefix="/classes", tags=["Classes"])
api_router.include_router(students_router, prefix="/students", tags=["Students"])
api_router.include_router(teachers_router, prefix="/teachers", tags=["Teachers"])
api_router.include_router(parents_router, prefix="/parents", tags=["Parents"])
api_router.include_router(curriculum_router, prefix="/curricula", tags=["Curriculum"])
api_router.include_router(timetables_router, prefix="/timetables", tags=["Timetables"])
api_router.include_router(rooms_router, prefix="/rooms", tags=["Rooms"])
api_router.include_router(events_router, prefix="/events", tags=["Events"])
api_router.include_router(attendance_router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(report_cards_router, prefix="/report-cards", tags=["Report Cards"])
api_router.include_router(fees_router, prefix="/fees", tags=["Fees"])
api_router.include_router(materials_router, prefix="/materials", tags=["Materials"])
api_router.include_router(cart_router, prefix="/cart", tags=["Cart"])
api_router.include_router(orders_router, prefix="/orders", tags=["Orders"])
api_router.include_router(payments_router, prefix="/payments", tags=["Payments"])
api_router.include_router(
    notifications_router, prefix="/notifications", tags=["Notifications"]
)
