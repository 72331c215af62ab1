"""
CRUD operations (Create, Read, Update, Delete) for the job board tables.

This layer keeps storage details out of the services, following the
Repository pattern: camelCase dicts in, camelCase dicts out.
"""

from app.crud import application, job, user

__all__ = ["user", "job", "application"]
