"""
Celery tasks package.

Tasks are organized by domain:
- newsletter_tasks: Scheduled job alert e-mails
"""

from app.tasks import newsletter_tasks

__all__ = ["newsletter_tasks"]
