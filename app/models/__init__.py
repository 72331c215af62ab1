"""
Database models package.
"""

from app.models.user import User, UserRole
from app.models.job import Job, JobType, HiringMultiple
from app.models.application import Application

__all__ = ["User", "UserRole", "Job", "JobType", "HiringMultiple", "Application"]
