"""
Declarative models.

Every module is imported here so string relationship targets resolve no
matter which model a caller imports first.
"""

from database.models import users, companies, players, jobs  # noqa: F401
