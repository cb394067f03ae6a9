"""Background tasks module.

This module contains both Celery tasks (scheduled maintenance jobs) and
FastAPI BackgroundTasks (quick, fire-and-forget operations).

Celery tasks:
- Purging expired sessions

BackgroundTasks:
- Slack notifications on issue creation and assignment

IMPORTANT: Import notifications directly here, but import celery_tasks
explicitly when needed to avoid circular imports with Celery initialization.
"""

from app.tasks.notifications import notify_issue_assignment, notify_issue_creation

# Celery tasks are available but not imported here to prevent circular imports
# Use: from app.tasks.celery_tasks import purge_expired_sessions

__all__ = ["notify_issue_assignment", "notify_issue_creation"]
