"""
CRUD operations for job postings.

Implements the Repository pattern for jobs: parameterized statements in,
application-facing dicts (camelCase keys) out. Listing queries join the
poster and nest it under "poster" when the join matched.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import delete as sql_delete, func, insert, select, true, update as sql_update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import transaction
from app.core.validation import ErrorListBuilder
from app.crud.base import FieldMap, apply_filters, apply_pagination, coerce_id, update_values
from app.models.job import HiringMultiple, Job, JobType
from app.models.user import User

jobs = Job.__table__
users = User.__table__

JOB_FIELDS = FieldMap({
    "jobType": "job_type",
    "companyName": "company_name",
    "hiringMultipleCandidates": "hiring_multiple_candidates",
    "personalWebsiteTitle": "personal_website_title",
    "personalWebsiteUrl": "personal_website_url",
    "jobNiche": "job_niche",
    "newsLettersSent": "newsletters_sent",
    "jobPostedOn": "job_posted_on",
    "postedBy": "posted_by",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
})

JOB_TYPES = tuple(job_type.value for job_type in JobType)
HIRING_OPTIONS = tuple(option.value for option in HiringMultiple)

EXACT_FILTERS = {
    "jobNiche": jobs.c.job_niche,
    "jobType": jobs.c.job_type,
    "postedBy": jobs.c.posted_by,
    "newsLettersSent": jobs.c.newsletters_sent,
}
PARTIAL_FILTERS = {
    "location": jobs.c.location,
    "companyName": jobs.c.company_name,
}
SEARCH_COLUMNS = (jobs.c.title, jobs.c.company_name, jobs.c.job_niche)
ID_FILTERS = ("postedBy",)

POSTER_COLUMNS = (
    users.c.name.label("poster_name"),
    users.c.email.label("poster_email"),
    users.c.role.label("poster_role"),
)


def format_job(row: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return JOB_FIELDS.to_fields(row, jobs.c.keys())


def format_job_with_poster(row: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Job plus a nested "poster", attached only when the poster join matched."""
    job = format_job(row)
    if job is not None and row.get("poster_name") is not None:
        role = row.get("poster_role")
        job["poster"] = {
            "name": row["poster_name"],
            "email": row["poster_email"],
            "role": getattr(role, "value", role),
        }
    return job


def _with_poster():
    return select(jobs, *POSTER_COLUMNS).select_from(
        jobs.outerjoin(users, jobs.c.posted_by == users.c.id)
    )


def _filtered(stmt, filters: Mapping[str, Any]):
    return apply_filters(
        stmt,
        filters,
        exact=EXACT_FILTERS,
        partial=PARTIAL_FILTERS,
        ids=ID_FILTERS,
        search=SEARCH_COLUMNS,
    )


def create(db: Session, job_data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Insert a job posting.

    Args:
        db: Database session
        job_data: Validated camelCase job data including postedBy

    Returns:
        Created job
    """
    values = {
        "title": job_data["title"],
        "job_type": job_data["jobType"],
        "location": job_data["location"],
        "company_name": job_data["companyName"],
        "introduction": job_data.get("introduction") or None,
        "responsibilities": job_data["responsibilities"],
        "qualifications": job_data["qualifications"],
        "offers": job_data.get("offers") or None,
        "salary": job_data["salary"],
        "hiring_multiple_candidates": job_data.get("hiringMultipleCandidates") or HiringMultiple.NO.value,
        "personal_website_title": job_data.get("personalWebsiteTitle") or None,
        "personal_website_url": job_data.get("personalWebsiteUrl") or None,
        "job_niche": job_data["jobNiche"],
        "posted_by": coerce_id(job_data["postedBy"]),
    }

    with transaction(db):
        row = db.execute(insert(jobs).values(**values).returning(*jobs.c)).mappings().one()
    return format_job(row)


def get_by_id(db: Session, job_id: Any) -> Optional[Dict[str, Any]]:
    stmt = select(jobs).where(jobs.c.id == coerce_id(job_id))
    row = db.execute(stmt).mappings().first()
    return format_job(row)


def get_by_id_with_poster(db: Session, job_id: Any) -> Optional[Dict[str, Any]]:
    stmt = _with_poster().where(jobs.c.id == coerce_id(job_id))
    return format_job_with_poster(db.execute(stmt).mappings().first())


def update(db: Session, job_id: Any, update_data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Partially update a job. Keys absent from update_data are left untouched.

    Raises:
        NoFieldsToUpdateError: If update_data has no applicable field
    """
    values = update_values(jobs, JOB_FIELDS, update_data, id_columns=("posted_by",))
    stmt = (
        sql_update(jobs)
        .where(jobs.c.id == coerce_id(job_id))
        .values(**values)
        .returning(*jobs.c)
    )
    with transaction(db):
        row = db.execute(stmt).mappings().first()
    return format_job(row)


def delete(db: Session, job_id: Any) -> Optional[Dict[str, Any]]:
    """Delete a job (applications cascade); returns the pre-delete snapshot."""
    stmt = sql_delete(jobs).where(jobs.c.id == coerce_id(job_id)).returning(*jobs.c)
    with transaction(db):
        row = db.execute(stmt).mappings().first()
    return format_job(row)


def get_multi(db: Session, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    List jobs with their poster, newest first.

    Filters: jobNiche, jobType, postedBy, newsLettersSent (exact);
    location, companyName (partial); search (title, company or niche);
    limit, offset.
    """
    filters = filters or {}
    stmt = _filtered(_with_poster(), filters).order_by(jobs.c.created_at.desc())
    stmt = apply_pagination(stmt, filters)
    return [format_job_with_poster(row) for row in db.execute(stmt).mappings()]


def get_by_user_id(
    db: Session,
    user_id: Any,
    filters: Optional[Mapping[str, Any]] = None
) -> List[Dict[str, Any]]:
    """Jobs posted by one employer, newest first (no poster join)."""
    filters = dict(filters or {})
    filters["postedBy"] = user_id
    stmt = _filtered(select(jobs), filters).order_by(jobs.c.created_at.desc())
    stmt = apply_pagination(stmt, filters)
    return [format_job(row) for row in db.execute(stmt).mappings()]


def count(db: Session, filters: Optional[Mapping[str, Any]] = None) -> int:
    stmt = _filtered(select(func.count()).select_from(jobs), filters or {})
    return db.execute(stmt).scalar_one()


def get_jobs_for_newsletter(db: Session, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Unsent postings created within the last NEWSLETTER_WINDOW_HOURS.

    Postings that age out of the window without being sent are never
    picked up again.

    Args:
        db: Database session
        now: Reference time (default: current UTC time)
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=settings.NEWSLETTER_WINDOW_HOURS)

    stmt = (
        _with_poster()
        .where(jobs.c.newsletters_sent.is_(False))
        .where(jobs.c.created_at >= cutoff)
        .order_by(jobs.c.created_at.desc())
    )
    return [format_job_with_poster(row) for row in db.execute(stmt).mappings()]


def mark_newsletter_sent(db: Session, job_ids: Iterable[Any]) -> int:
    """
    Flag many postings as sent with a single UPDATE.

    Returns:
        Number of rows updated
    """
    ids = [coerce_id(job_id) for job_id in job_ids]
    if not ids:
        return 0

    stmt = (
        sql_update(jobs)
        .where(jobs.c.id.in_(ids))
        .values(newsletters_sent=true())
    )
    with transaction(db):
        result = db.execute(stmt)
    return result.rowcount


def validate_job_data(job_data: Mapping[str, Any]) -> List[str]:
    """
    Validate job posting data.

    Returns:
        Every violated rule's message (empty list when valid)
    """
    errors = (
        ErrorListBuilder()
        .require_text(job_data.get("title"), "Job title is required")
        .one_of(job_data.get("jobType"), JOB_TYPES, 'Job type must be either "Full-time" or "Part-time"')
        .require_text(job_data.get("location"), "Job location is required")
        .require_text(job_data.get("companyName"), "Company name is required")
        .require_text(job_data.get("responsibilities"), "Job responsibilities are required")
        .require_text(job_data.get("qualifications"), "Job qualifications are required")
        .require_text(job_data.get("salary"), "Salary information is required")
        .require_text(job_data.get("jobNiche"), "Job niche is required")
        .require(job_data.get("postedBy"), "Posted by user ID is required")
    )

    hiring = job_data.get("hiringMultipleCandidates")
    if hiring not in (None, ""):
        errors.one_of(hiring, HIRING_OPTIONS, 'Hiring multiple candidates must be either "Yes" or "No"')

    return errors.build()
