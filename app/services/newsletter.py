"""
Job newsletter broadcaster.

Every run e-mails each fresh, unsent posting to the job seekers whose niches
match it, then flags the postings it handled. Postings that leave the
NEWSLETTER_WINDOW_HOURS window unsent are never retried.

Runs are not reentrant: two overlapping runs read the same unsent postings
and both send them.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol

from sqlalchemy.orm import Session

from app.crud import job as crud_job
from app.crud import user as crud_user

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send_email(self, to_email: str, subject: str, message: str) -> bool:
        ...


@dataclass
class NewsletterRunSummary:
    """Counters for one broadcaster run."""
    jobs_found: int = 0
    emails_sent: int = 0
    emails_failed: int = 0
    jobs_marked: List[Any] = field(default_factory=list)
    jobs_skipped: List[Any] = field(default_factory=list)
    jobs_failed: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobs_found": self.jobs_found,
            "emails_sent": self.emails_sent,
            "emails_failed": self.emails_failed,
            "jobs_marked": [str(job_id) for job_id in self.jobs_marked],
            "jobs_skipped": [str(job_id) for job_id in self.jobs_skipped],
            "jobs_failed": [str(job_id) for job_id in self.jobs_failed],
        }


def build_job_alert(job: Mapping[str, Any], user: Mapping[str, Any]) -> Dict[str, str]:
    """Subject and plain-text body of the alert sent to one subscriber."""
    subject = f"Hot Job Alert: {job['title']} in {job['jobNiche']} Available Now"
    message = f"""Hi {user['name']},

Great news! A new job that fits your niche has just been posted. The position is for a {job['title']} with {job['companyName']}, and they are looking to hire immediately.

Job Details:
- Position: {job['title']}
- Company: {job['companyName']}
- Location: {job['location']}
- Salary: {job['salary']}

Don't wait too long! Job openings like these are filled quickly.

We're here to support you in your job search. Best of luck!

Best Regards,
JobSphere Team"""
    return {"subject": subject, "message": message}


def _deliver(mailer: Mailer, job: Mapping[str, Any], user: Mapping[str, Any]) -> bool:
    alert = build_job_alert(job, user)
    try:
        delivered = mailer.send_email(user["email"], alert["subject"], alert["message"])
    except Exception as e:
        logger.error(f"Failed to send newsletter to {user['email']}: {e}")
        return False

    if delivered is False:
        logger.error(f"Failed to send newsletter to {user['email']}")
        return False

    logger.info(f"Newsletter sent to: {user['email']}")
    return True


def run_newsletter(
    db: Session,
    mailer: Optional[Mailer] = None,
    now: Optional[datetime] = None
) -> NewsletterRunSummary:
    """
    Broadcast every unsent posting from the current window.

    Args:
        db: Database session
        mailer: Anything with send_email(to_email, subject, message) (default: SES)
        now: Reference time for the window (default: current UTC time)

    Returns:
        NewsletterRunSummary of the run

    A posting is marked sent once all of its subscribers were attempted, even
    if some sends failed. A posting without subscribers stays unsent.
    """
    if mailer is None:
        from app.services.email_service import email_service
        mailer = email_service

    summary = NewsletterRunSummary()
    jobs = crud_job.get_jobs_for_newsletter(db, now=now)
    summary.jobs_found = len(jobs)

    if not jobs:
        logger.info("No new jobs found for newsletter")
        return summary

    logger.info(f"Processing {len(jobs)} jobs for newsletter")

    for job in jobs:
        try:
            subscribers = crud_user.find_by_job_niche(db, job["jobNiche"])
        except Exception as e:
            db.rollback()
            logger.error(f"Error processing job {job['id']}: {e}", exc_info=True)
            summary.jobs_failed.append(job["id"])
            continue

        if not subscribers:
            logger.info(f"No users found for job niche: {job['jobNiche']}")
            summary.jobs_skipped.append(job["id"])
            continue

        logger.info(f"Sending newsletter to {len(subscribers)} users for job: {job['title']}")
        for user in subscribers:
            if _deliver(mailer, job, user):
                summary.emails_sent += 1
            else:
                summary.emails_failed += 1

        summary.jobs_marked.append(job["id"])

    if summary.jobs_marked:
        crud_job.mark_newsletter_sent(db, summary.jobs_marked)
        logger.info(f"Marked {len(summary.jobs_marked)} jobs as newsletter sent")

    return summary
