"""
CRUD operations for job applications.

Applications are hidden from each party through its own soft-delete flag.
Once both parties have deleted an application the row is purged.
"""

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete as sql_delete, func, insert, select, true, update as sql_update
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.validation import ErrorListBuilder
from app.crud.base import FieldMap, apply_filters, apply_pagination, coerce_id, update_values
from app.models.application import Application
from app.models.job import Job
from app.models.user import User, UserRole

applications = Application.__table__
jobs = Job.__table__
job_seekers = User.__table__.alias("job_seekers")
employers = User.__table__.alias("employers")

APPLICATION_FIELDS = FieldMap({
    "jobSeekerUserId": "job_seeker_user_id",
    "jobSeekerName": "job_seeker_name",
    "jobSeekerEmail": "job_seeker_email",
    "jobSeekerPhone": "job_seeker_phone",
    "jobSeekerAddress": "job_seeker_address",
    "resumePublicId": "resume_public_id",
    "resumeUrl": "resume_url",
    "coverLetter": "cover_letter",
    "jobSeekerRole": "job_seeker_role",
    "employerUserId": "employer_user_id",
    "employerRole": "employer_role",
    "jobId": "job_id",
    "jobTitle": "job_title",
    "deletedByJobSeeker": "deleted_by_job_seeker",
    "deletedByEmployer": "deleted_by_employer",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
})

ID_COLUMNS = ("job_seeker_user_id", "employer_user_id", "job_id")
EXACT_FILTERS = {"jobId": applications.c.job_id}

JOB_COLUMNS = (
    jobs.c.title.label("job_title_full"),
    jobs.c.company_name.label("job_company_name"),
    jobs.c.location.label("job_location"),
    jobs.c.salary.label("job_salary"),
)
JOB_SEEKER_COLUMNS = (
    job_seekers.c.name.label("job_seeker_name_full"),
    job_seekers.c.email.label("job_seeker_email_full"),
    job_seekers.c.phone.label("job_seeker_phone_full"),
)
EMPLOYER_COLUMNS = (
    employers.c.name.label("employer_name"),
    employers.c.email.label("employer_email"),
)


def format_application(row: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return APPLICATION_FIELDS.to_fields(row, applications.c.keys())


def format_application_with_details(row: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Application plus nested "job", "jobSeeker" and "employer" objects.

    Each nested object is attached only when its join matched a row.
    """
    application = format_application(row)
    if application is None:
        return None

    if row.get("job_title_full") is not None:
        application["job"] = {
            "title": row["job_title_full"],
            "companyName": row["job_company_name"],
            "location": row["job_location"],
            "salary": row["job_salary"],
        }

    if row.get("job_seeker_name_full") is not None:
        application["jobSeeker"] = {
            "name": row["job_seeker_name_full"],
            "email": row["job_seeker_email_full"],
            "phone": row["job_seeker_phone_full"],
        }

    if row.get("employer_name") is not None:
        application["employer"] = {
            "name": row["employer_name"],
            "email": row["employer_email"],
        }

    return application


def _with_details(job: bool = True, job_seeker: bool = True, employer: bool = True):
    """SELECT applications LEFT JOIN the requested related rows."""
    columns = [applications]
    source = applications
    if job:
        columns.extend(JOB_COLUMNS)
        source = source.outerjoin(jobs, applications.c.job_id == jobs.c.id)
    if job_seeker:
        columns.extend(JOB_SEEKER_COLUMNS)
        source = source.outerjoin(job_seekers, applications.c.job_seeker_user_id == job_seekers.c.id)
    if employer:
        columns.extend(EMPLOYER_COLUMNS)
        source = source.outerjoin(employers, applications.c.employer_user_id == employers.c.id)
    return select(*columns).select_from(source)


def _filtered(stmt, filters: Mapping[str, Any]):
    """
    Filters: jobSeekerUserId, employerUserId, jobId.

    Filtering by a party also hides the rows that party has deleted.
    """
    stmt = apply_filters(stmt, filters, exact=EXACT_FILTERS, ids=EXACT_FILTERS.keys())

    job_seeker_id = filters.get("jobSeekerUserId")
    if job_seeker_id:
        stmt = stmt.where(
            applications.c.job_seeker_user_id == coerce_id(job_seeker_id),
            applications.c.deleted_by_job_seeker.is_(False),
        )

    employer_id = filters.get("employerUserId")
    if employer_id:
        stmt = stmt.where(
            applications.c.employer_user_id == coerce_id(employer_id),
            applications.c.deleted_by_employer.is_(False),
        )

    return stmt


def create(db: Session, application_data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Insert an application.

    Args:
        db: Database session
        application_data: Validated camelCase snapshot of the job seeker and job

    Returns:
        Created application
    """
    values = {
        "job_seeker_user_id": coerce_id(application_data["jobSeekerUserId"]),
        "job_seeker_name": application_data["jobSeekerName"],
        "job_seeker_email": application_data["jobSeekerEmail"],
        "job_seeker_phone": application_data["jobSeekerPhone"],
        "job_seeker_address": application_data["jobSeekerAddress"],
        "resume_public_id": application_data.get("resumePublicId") or None,
        "resume_url": application_data.get("resumeUrl") or None,
        "cover_letter": application_data["coverLetter"],
        "job_seeker_role": UserRole.JOB_SEEKER,
        "employer_user_id": coerce_id(application_data["employerUserId"]),
        "employer_role": UserRole.EMPLOYER,
        "job_id": coerce_id(application_data["jobId"]),
        "job_title": application_data["jobTitle"],
    }

    with transaction(db):
        row = db.execute(
            insert(applications).values(**values).returning(*applications.c)
        ).mappings().one()
    return format_application(row)


def get_by_id(db: Session, application_id: Any) -> Optional[Dict[str, Any]]:
    stmt = select(applications).where(applications.c.id == coerce_id(application_id))
    return format_application(db.execute(stmt).mappings().first())


def get_by_id_with_details(db: Session, application_id: Any) -> Optional[Dict[str, Any]]:
    stmt = _with_details().where(applications.c.id == coerce_id(application_id))
    return format_application_with_details(db.execute(stmt).mappings().first())


def find_existing(db: Session, job_seeker_user_id: Any, job_id: Any) -> Optional[Dict[str, Any]]:
    """
    The active application of a job seeker for a job, if any.

    An application deleted by either party no longer counts as active.
    """
    stmt = select(applications).where(
        applications.c.job_seeker_user_id == coerce_id(job_seeker_user_id),
        applications.c.job_id == coerce_id(job_id),
        applications.c.deleted_by_job_seeker.is_(False),
        applications.c.deleted_by_employer.is_(False),
    )
    return format_application(db.execute(stmt).mappings().first())


def update(db: Session, application_id: Any, update_data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Partially update an application.

    Raises:
        NoFieldsToUpdateError: If update_data has no applicable field
    """
    values = update_values(applications, APPLICATION_FIELDS, update_data, id_columns=ID_COLUMNS)
    stmt = (
        sql_update(applications)
        .where(applications.c.id == coerce_id(application_id))
        .values(**values)
        .returning(*applications.c)
    )
    with transaction(db):
        row = db.execute(stmt).mappings().first()
    return format_application(row)


def _soft_delete(db: Session, application_id: Any, owner_id: Any, owner_column, flag_column) -> Optional[Dict[str, Any]]:
    """
    Set one party's deletion flag; purge the row once both flags are set.

    Returns:
        The application as of the flag update, or None if the id does not
        belong to the given party
    """
    stmt = (
        sql_update(applications)
        .where(applications.c.id == coerce_id(application_id), owner_column == coerce_id(owner_id))
        .values({flag_column: true()})
        .returning(*applications.c)
    )
    with transaction(db):
        row = db.execute(stmt).mappings().first()
        if row is not None and row["deleted_by_job_seeker"] and row["deleted_by_employer"]:
            db.execute(sql_delete(applications).where(applications.c.id == row["id"]))
    return format_application(row)


def soft_delete_by_job_seeker(db: Session, application_id: Any, job_seeker_user_id: Any) -> Optional[Dict[str, Any]]:
    return _soft_delete(
        db,
        application_id,
        job_seeker_user_id,
        applications.c.job_seeker_user_id,
        applications.c.deleted_by_job_seeker,
    )


def soft_delete_by_employer(db: Session, application_id: Any, employer_user_id: Any) -> Optional[Dict[str, Any]]:
    return _soft_delete(
        db,
        application_id,
        employer_user_id,
        applications.c.employer_user_id,
        applications.c.deleted_by_employer,
    )


def hard_delete(db: Session, application_id: Any) -> Optional[Dict[str, Any]]:
    """Remove an application regardless of its flags; returns the pre-delete snapshot."""
    stmt = (
        sql_delete(applications)
        .where(applications.c.id == coerce_id(application_id))
        .returning(*applications.c)
    )
    with transaction(db):
        row = db.execute(stmt).mappings().first()
    return format_application(row)


delete = hard_delete


def get_multi(db: Session, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """List applications with job, job seeker and employer details, newest first."""
    filters = filters or {}
    stmt = _filtered(_with_details(), filters).order_by(applications.c.created_at.desc())
    stmt = apply_pagination(stmt, filters)
    return [format_application_with_details(row) for row in db.execute(stmt).mappings()]


def get_by_job_seeker(
    db: Session,
    job_seeker_user_id: Any,
    filters: Optional[Mapping[str, Any]] = None
) -> List[Dict[str, Any]]:
    """A job seeker's applications (excluding ones they deleted) with job and employer details."""
    filters = dict(filters or {})
    filters["jobSeekerUserId"] = job_seeker_user_id
    stmt = _filtered(_with_details(job_seeker=False), filters).order_by(applications.c.created_at.desc())
    stmt = apply_pagination(stmt, filters)
    return [format_application_with_details(row) for row in db.execute(stmt).mappings()]


def get_by_employer(
    db: Session,
    employer_user_id: Any,
    filters: Optional[Mapping[str, Any]] = None
) -> List[Dict[str, Any]]:
    """An employer's received applications (excluding ones they deleted) with job and job seeker details."""
    filters = dict(filters or {})
    filters["employerUserId"] = employer_user_id
    stmt = _filtered(_with_details(employer=False), filters).order_by(applications.c.created_at.desc())
    stmt = apply_pagination(stmt, filters)
    return [format_application_with_details(row) for row in db.execute(stmt).mappings()]


def get_by_job_id(db: Session, job_id: Any, employer_user_id: Any = None) -> List[Dict[str, Any]]:
    """Applications for one job that the employer has not deleted, with job seeker details."""
    stmt = (
        _with_details(job=False, employer=False)
        .where(
            applications.c.job_id == coerce_id(job_id),
            applications.c.deleted_by_employer.is_(False),
        )
    )
    if employer_user_id:
        stmt = stmt.where(applications.c.employer_user_id == coerce_id(employer_user_id))
    stmt = stmt.order_by(applications.c.created_at.desc())
    return [format_application_with_details(row) for row in db.execute(stmt).mappings()]


def count(db: Session, filters: Optional[Mapping[str, Any]] = None) -> int:
    stmt = _filtered(select(func.count()).select_from(applications), filters or {})
    return db.execute(stmt).scalar_one()


def validate_application_data(application_data: Mapping[str, Any]) -> List[str]:
    """
    Validate an application snapshot.

    Returns:
        Every violated rule's message (empty list when valid)
    """
    return (
        ErrorListBuilder()
        .require(application_data.get("jobSeekerUserId"), "Job seeker user ID is required")
        .require_text(application_data.get("jobSeekerName"), "Job seeker name is required")
        .email(application_data.get("jobSeekerEmail"), "Valid job seeker email is required")
        .phone(application_data.get("jobSeekerPhone"), "Job seeker phone is required")
        .require_text(application_data.get("jobSeekerAddress"), "Job seeker address is required")
        .require_text(application_data.get("coverLetter"), "Cover letter is required")
        .require(application_data.get("employerUserId"), "Employer user ID is required")
        .require(application_data.get("jobId"), "Job ID is required")
        .require_text(application_data.get("jobTitle"), "Job title is required")
        .build()
    )
