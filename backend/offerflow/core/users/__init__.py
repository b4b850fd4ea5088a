"""
Users domain
"""

from offerflow.core.users.models import User, UserRole

__all__ = ["User", "UserRole"]
