"""Celery tasks for periodic maintenance of authentication data."""

import logging

from sqlalchemy import delete

from app.database import models
from app.database.config import SyncSessionLocal
from app.celery_app import app

logger = logging.getLogger(__name__)


def delete_expired_sessions(db) -> int:
    """Delete every session whose expiry is in the past and return how many went."""
    result = db.execute(
        delete(models.Session)
        .where(models.Session.expires_at <= models.utcnow())
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount or 0


@app.task(bind=True, max_retries=3, default_retry_delay=60)
def purge_expired_sessions(self):
    """
    Remove expired sessions from the database.

    Expired sessions are already rejected at request time; this keeps the
    table from growing without bound. Scheduled hourly by Celery beat.

    Returns:
        Number of sessions deleted

    Raises:
        self.retry(): Retries up to 3 times with increasing delay
    """
    db = SyncSessionLocal()

    try:
        deleted = delete_expired_sessions(db)
        logger.info(
            f"Purged {deleted} expired sessions",
            extra={"deleted": deleted},
        )
        return deleted

    except Exception as exc:
        db.rollback()
        logger.error(
            f"Error purging expired sessions: {str(exc)}",
            exc_info=True,
        )

        # Delay: 60s, 120s, 180s for retries 1, 2, 3
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))

    finally:
        db.close()
