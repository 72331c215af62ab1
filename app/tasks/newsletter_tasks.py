"""
Celery task for the scheduled job newsletter.

Celery beat triggers send_job_newsletter every NEWSLETTER_INTERVAL_SECONDS
(see app/core/celery_app.py).
"""

import logging
from celery import shared_task
from app.core.database import SessionLocal
from app.core.errors import classify_error
from app.services.newsletter import run_newsletter

logger = logging.getLogger(__name__)


@shared_task(name="send_job_newsletter")
def send_job_newsletter():
    """
    Run one newsletter pass with its own database session.

    Not retried: a failed pass is picked up again by the next beat tick,
    as long as the postings are still inside the window.

    Returns:
        Run summary as a dict (JSON-serializable result)
    """
    logger.info("Running job newsletter")
    db = SessionLocal()
    try:
        summary = run_newsletter(db)
        logger.info(
            f"Newsletter finished: {summary.emails_sent} sent, {summary.emails_failed} failed, "
            f"{len(summary.jobs_marked)} jobs marked"
        )
        return summary.to_dict()
    except Exception as e:
        classification = classify_error(e)
        logger.error(
            f"ERROR IN NEWSLETTER ({classification.category}): {classification.message}",
            exc_info=True
        )
        raise
    finally:
        db.close()
