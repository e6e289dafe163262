"""
Schools module - School tenant registration and management.
"""

from edutrack.modules.schools.models import RegistrationStatus, School, SchoolType
from edutrack.modules.schools.repository import SchoolRepository

__all__ = ["RegistrationStatus", "School", "SchoolType", "SchoolRepository"]
