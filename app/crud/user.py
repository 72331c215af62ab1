"""
CRUD operations for users.

Every function takes and returns application-facing dicts (camelCase keys).
Two formatters exist on purpose: format_user keeps the password digest for
the authentication path, format_user_response drops it for everything else.
"""

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import case, delete as sql_delete, func, insert, null, or_, select, update as sql_update
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.security import get_password_hash, verify_password
from app.core.validation import ErrorListBuilder, is_blank
from app.crud.base import FieldMap, apply_filters, apply_pagination, coerce_id, update_values
from app.models.user import User, UserRole

users = User.__table__

USER_FIELDS = FieldMap({
    "firstNiche": "first_niche",
    "secondNiche": "second_niche",
    "thirdNiche": "third_niche",
    "resumePublicId": "resume_public_id",
    "resumeUrl": "resume_url",
    "coverLetter": "cover_letter",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
})

NICHE_FIELDS = ("firstNiche", "secondNiche", "thirdNiche")
ROLES = tuple(role.value for role in UserRole)
SENSITIVE_FIELDS = ("password",)

EXACT_FILTERS = {"role": users.c.role}
PARTIAL_FILTERS = {"email": users.c.email}


def format_user(row: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Authentication-facing view: includes the password digest."""
    if row is None:
        return None
    return USER_FIELDS.to_fields(row, users.c.keys())


def format_user_response(row: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Response-facing view: never includes the password digest."""
    if row is None:
        return None
    return USER_FIELDS.to_fields(
        row, [column for column in users.c.keys() if column not in SENSITIVE_FIELDS]
    )


def create(db: Session, user_data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Insert a user. The password is hashed here; Employers never store niches.

    Args:
        db: Database session
        user_data: Validated camelCase user data (phone already normalized)

    Returns:
        The created user (response-facing)
    """
    is_job_seeker = user_data.get("role") == UserRole.JOB_SEEKER.value

    values = {
        "name": user_data["name"],
        "email": user_data["email"],
        "phone": user_data["phone"],
        "address": user_data["address"],
        "password": get_password_hash(user_data["password"]),
        "role": user_data["role"],
        "resume_public_id": user_data.get("resumePublicId") or None,
        "resume_url": user_data.get("resumeUrl") or None,
        "cover_letter": user_data.get("coverLetter") or None,
    }
    for field in NICHE_FIELDS:
        column = USER_FIELDS.to_column(field)
        values[column] = (user_data.get(field) or None) if is_job_seeker else None

    with transaction(db):
        row = db.execute(insert(users).values(**values).returning(*users.c)).mappings().one()
    return format_user_response(row)


def get_by_id(db: Session, user_id: Any) -> Optional[Dict[str, Any]]:
    """Retrieve a user by id (response-facing)."""
    stmt = select(users).where(users.c.id == coerce_id(user_id))
    row = db.execute(stmt).mappings().first()
    return format_user_response(row)


def get_by_id_for_auth(db: Session, user_id: Any) -> Optional[Dict[str, Any]]:
    """Retrieve a user by id including the password digest."""
    stmt = select(users).where(users.c.id == coerce_id(user_id))
    row = db.execute(stmt).mappings().first()
    return format_user(row)


def get_by_email(db: Session, email: str) -> Optional[Dict[str, Any]]:
    """Retrieve a user by email including the password digest (login path)."""
    row = db.execute(select(users).where(users.c.email == email)).mappings().first()
    return format_user(row)


def update(db: Session, user_id: Any, update_data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Partially update a user.

    Only keys present in update_data are written (explicit None included).
    A new password is hashed before storing.

    Returns:
        Updated user (response-facing), or None if the id does not exist

    Raises:
        NoFieldsToUpdateError: If update_data has no applicable field
    """
    values = update_values(users, USER_FIELDS, update_data)
    if values.get("password") is not None:
        values["password"] = get_password_hash(values["password"])

    niche_columns = [USER_FIELDS.to_column(field) for field in NICHE_FIELDS]
    if values.get("role") == UserRole.EMPLOYER.value:
        values.update({column: None for column in niche_columns})
    elif "role" not in values:
        # Employers keep null niches even if a niche value is sent.
        # Skipped on a role change: the CASE would see the old role.
        for column in niche_columns:
            if column in values:
                values[column] = case(
                    (users.c.role == UserRole.EMPLOYER, null()),
                    else_=values[column],
                )

    stmt = (
        sql_update(users)
        .where(users.c.id == coerce_id(user_id))
        .values(**values)
        .returning(*users.c)
    )
    with transaction(db):
        row = db.execute(stmt).mappings().first()
    return format_user_response(row)


def delete(db: Session, user_id: Any) -> Optional[Dict[str, Any]]:
    """Delete a user; returns the pre-delete snapshot or None if not found."""
    stmt = sql_delete(users).where(users.c.id == coerce_id(user_id)).returning(*users.c)
    with transaction(db):
        row = db.execute(stmt).mappings().first()
    return format_user_response(row)


def _filtered(stmt, filters: Mapping[str, Any]):
    return apply_filters(stmt, filters, exact=EXACT_FILTERS, partial=PARTIAL_FILTERS)


def get_multi(db: Session, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    List users, newest first.

    Filters: role (exact), email (partial), limit, offset.
    """
    filters = filters or {}
    stmt = _filtered(select(users), filters).order_by(users.c.created_at.desc())
    stmt = apply_pagination(stmt, filters)
    return [format_user_response(row) for row in db.execute(stmt).mappings()]


def count(db: Session, filters: Optional[Mapping[str, Any]] = None) -> int:
    stmt = _filtered(select(func.count()).select_from(users), filters or {})
    return db.execute(stmt).scalar_one()


def find_by_job_niche(db: Session, job_niche: str) -> List[Dict[str, Any]]:
    """
    Job seekers subscribed to a niche (newsletter audience).

    A user matches when any of their three niches equals job_niche exactly;
    the comparison is case-sensitive.
    """
    stmt = (
        select(users)
        .where(users.c.role == UserRole.JOB_SEEKER)
        .where(or_(
            users.c.first_niche == job_niche,
            users.c.second_niche == job_niche,
            users.c.third_niche == job_niche,
        ))
        .order_by(users.c.created_at.desc())
    )
    return [format_user_response(row) for row in db.execute(stmt).mappings()]


def compare_password(user: Mapping[str, Any], entered_password: str) -> bool:
    """Check a plaintext password against an authentication-facing user dict."""
    digest = user.get("password")
    if not digest or not entered_password:
        return False
    return verify_password(entered_password, digest)


def validate_user_data(user_data: Mapping[str, Any]) -> List[str]:
    """
    Validate registration data.

    Returns:
        Every violated rule's message (empty list when valid)
    """
    errors = (
        ErrorListBuilder()
        .length_between(user_data.get("name"), 3, 30, "Name must be between 3 and 30 characters")
        .email(user_data.get("email"), "Please provide a valid email")
        .phone(user_data.get("phone"), "Please provide a phone number")
        .require_text(user_data.get("address"), "Please provide your address")
        .length_between(user_data.get("password"), 8, 32, "Password must be between 8 and 32 characters")
        .one_of(user_data.get("role"), ROLES, 'Role must be either "Job Seeker" or "Employer"')
    )

    if user_data.get("role") == UserRole.JOB_SEEKER.value:
        errors.check(
            not any(is_blank(user_data.get(field)) for field in NICHE_FIELDS),
            "Job Seekers must provide three job niches",
        )

    return errors.build()
