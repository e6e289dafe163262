"""
Users module - User management and authentication.
"""

from edutrack.modules.users.models import User, UserRole
from edutrack.modules.users.repository import UserRepository

__all__ = ["User", "UserRole", "UserRepository"]
