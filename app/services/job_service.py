"""
Job posting use cases.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.errors import AuthorizationError, NotFoundError, ValidationError
from app.core.security import Identity
from app.crud import job as crud_job
from app.models.user import UserRole
from app.schemas.base import Payload, as_payload

logger = logging.getLogger(__name__)

JOB_FIELDS = (
    "title", "jobType", "location", "companyName", "introduction",
    "responsibilities", "qualifications", "offers", "salary",
    "hiringMultipleCandidates", "personalWebsiteTitle", "personalWebsiteUrl",
    "jobNiche",
)


def _require_employer(identity: Identity, message: str) -> None:
    if identity.role != UserRole.EMPLOYER.value:
        raise AuthorizationError(message)


def post_job(db: Session, identity: Identity, data: Payload) -> Dict[str, Any]:
    _require_employer(identity, "Only employers can post jobs.")

    payload = as_payload(data)
    job_data = {field: payload.get(field) for field in JOB_FIELDS}
    job_data["postedBy"] = identity.user_id

    errors = crud_job.validate_job_data(job_data)
    if errors:
        raise ValidationError(errors)

    job = crud_job.create(db, job_data)
    logger.info(f"Job {job['id']} posted by {identity.user_id}")
    return job


def list_jobs(
    db: Session,
    city: Optional[str] = None,
    niche: Optional[str] = None,
    search_keyword: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None
) -> List[Dict[str, Any]]:
    """Public job board: city is a partial match, niche exact, keyword searches title/company/niche."""
    filters = {
        "location": city,
        "jobNiche": niche,
        "search": search_keyword,
        "limit": limit,
        "offset": offset,
    }
    return crud_job.get_multi(db, filters)


def get_my_jobs(db: Session, identity: Identity) -> List[Dict[str, Any]]:
    _require_employer(identity, "Only employers can access this resource.")
    return crud_job.get_by_user_id(db, identity.user_id)


def get_job(db: Session, job_id: Any) -> Dict[str, Any]:
    job = crud_job.get_by_id_with_poster(db, job_id)
    if job is None:
        raise NotFoundError("Job not found.")
    return job


def delete_job(db: Session, identity: Identity, job_id: Any) -> Dict[str, Any]:
    job = crud_job.get_by_id(db, job_id)
    if job is None:
        raise NotFoundError("Job not found.")

    if job["postedBy"] != identity.user_id:
        raise AuthorizationError("You are not authorized to delete this job.")

    deleted = crud_job.delete(db, job_id)
    logger.info(f"Job {job_id} deleted by {identity.user_id}")
    return deleted
