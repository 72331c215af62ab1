"""
Job application use cases.

The duplicate check in submit_application is a read followed by an insert;
two concurrent submissions for the same job can both pass it.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.core.errors import AppError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.core.phone import convert_phone_to_number
from app.core.security import Identity
from app.crud import application as crud_application
from app.crud import job as crud_job
from app.crud import user as crud_user
from app.models.user import UserRole
from app.schemas.base import Payload, as_payload

logger = logging.getLogger(__name__)


def submit_application(db: Session, identity: Identity, job_id: Any, data: Payload) -> Dict[str, Any]:
    """
    Apply to a job as the calling job seeker.

    The seeker's contact details are snapshotted onto the application along
    with the resume stored on their profile.

    Raises:
        AuthorizationError: If the caller is not a Job Seeker
        NotFoundError: If the job does not exist
        ConflictError: If an active application for the job already exists
        ValidationError: With every violated rule
    """
    if identity.role != UserRole.JOB_SEEKER.value:
        raise AuthorizationError("Only job seekers can apply for jobs.")

    job = crud_job.get_by_id(db, job_id)
    if job is None:
        raise NotFoundError("Job not found.")

    if crud_application.find_existing(db, identity.user_id, job["id"]):
        raise ConflictError("You have already applied for this job.")

    seeker = crud_user.get_by_id(db, identity.user_id) or {}
    payload = as_payload(data)
    application_data = {
        "jobSeekerUserId": identity.user_id,
        "jobSeekerName": payload.get("name"),
        "jobSeekerEmail": payload.get("email"),
        "jobSeekerPhone": payload.get("phone"),
        "jobSeekerAddress": payload.get("address"),
        "coverLetter": payload.get("coverLetter"),
        "resumePublicId": seeker.get("resumePublicId"),
        "resumeUrl": seeker.get("resumeUrl"),
        "employerUserId": job["postedBy"],
        "jobId": job["id"],
        "jobTitle": job["title"],
    }

    errors = crud_application.validate_application_data(application_data)
    if errors:
        raise ValidationError(errors)

    application_data["jobSeekerPhone"] = convert_phone_to_number(application_data["jobSeekerPhone"])

    application = crud_application.create(db, application_data)
    logger.info(f"Application {application['id']} submitted for job {job['id']}")
    return application


def employer_applications(db: Session, identity: Identity) -> List[Dict[str, Any]]:
    if identity.role != UserRole.EMPLOYER.value:
        raise AuthorizationError("Only employers can access this resource.")
    return crud_application.get_by_employer(db, identity.user_id)


def job_seeker_applications(db: Session, identity: Identity) -> List[Dict[str, Any]]:
    if identity.role != UserRole.JOB_SEEKER.value:
        raise AuthorizationError("Only job seekers can access this resource.")
    return crud_application.get_by_job_seeker(db, identity.user_id)


def delete_application(db: Session, identity: Identity, application_id: Any) -> Dict[str, Any]:
    """
    Hide an application from the caller's side.

    The row is removed for good once both sides have deleted it.
    """
    application = crud_application.get_by_id(db, application_id)
    if application is None:
        raise NotFoundError("Application not found.")

    if identity.role == UserRole.JOB_SEEKER.value:
        owner, soft_delete = application["jobSeekerUserId"], crud_application.soft_delete_by_job_seeker
    elif identity.role == UserRole.EMPLOYER.value:
        owner, soft_delete = application["employerUserId"], crud_application.soft_delete_by_employer
    else:
        raise ValidationError("Invalid user role.")

    if owner != identity.user_id:
        raise AuthorizationError("You are not authorized to delete this application.")

    deleted = soft_delete(db, application_id, identity.user_id)
    if deleted is None:
        raise AppError("Failed to delete application.")
    return deleted
