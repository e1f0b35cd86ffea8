"""
Domain package for the user seed service.

Exports the user models shared by the store, the operations, and the API.
"""

from user_service.domain.models import USER_COLUMNS, NewUser

__all__ = [
    "NewUser",
    "USER_COLUMNS",
]
