"""
User use cases: registration, login, token authentication and profile changes.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from app.core.phone import convert_phone_to_number
from app.core.security import Identity, create_access_token, decode_token
from app.core.validation import ErrorListBuilder, is_blank
from app.crud import user as crud_user
from app.crud.base import coerce_id
from app.models.user import UserRole
from app.schemas.base import Payload, as_payload

logger = logging.getLogger(__name__)

REGISTRATION_FIELDS = (
    "name", "email", "phone", "address", "password", "role",
    "firstNiche", "secondNiche", "thirdNiche", "coverLetter",
    "resumePublicId", "resumeUrl",
)
PROFILE_FIELDS = (
    "name", "email", "phone", "address", "coverLetter",
    "firstNiche", "secondNiche", "thirdNiche", "resumePublicId", "resumeUrl",
)


def register(db: Session, data: Payload) -> Dict[str, Any]:
    """
    Register a user.

    Returns:
        {"user": response-facing user, "token": JWT}

    Raises:
        ValidationError: With every violated rule
        ConflictError: If the email is already registered
    """
    payload = as_payload(data)
    user_data = {field: payload.get(field) for field in REGISTRATION_FIELDS}

    errors = crud_user.validate_user_data(user_data)
    if errors:
        raise ValidationError(errors)

    if crud_user.get_by_email(db, user_data["email"]):
        raise ConflictError("Email is already registered.")

    user_data["phone"] = convert_phone_to_number(user_data["phone"])

    user = crud_user.create(db, user_data)
    logger.info(f"Registered {user['role']} {user['id']}")
    return {"user": user, "token": create_access_token(user["id"])}


def login(db: Session, email: Optional[str], password: Optional[str], role: Optional[str]) -> Dict[str, Any]:
    if not email or not password or not role:
        raise ValidationError("Email, password, and role are required.")

    user = crud_user.get_by_email(db, email)
    if user is None or not crud_user.compare_password(user, password):
        raise AuthError("Invalid email or password.")

    if user["role"] != role:
        raise AuthError("Invalid user role.")

    user.pop("password", None)
    return {"user": user, "token": create_access_token(user["id"])}


def authenticate(db: Session, token: Optional[str]) -> Identity:
    """
    Resolve a bearer token to an Identity.

    Token decoding errors (expired, bad signature) propagate unchanged and are
    classified centrally.
    """
    if not token:
        raise AuthError("User is not authenticated.")

    claims = decode_token(token)
    user = crud_user.get_by_id(db, claims.get("id"))
    if user is None:
        raise NotFoundError("User not found.")

    return Identity(user_id=coerce_id(user["id"]), role=user["role"])


def get_profile(db: Session, identity: Identity) -> Dict[str, Any]:
    user = crud_user.get_by_id(db, identity.user_id)
    if user is None:
        raise NotFoundError("User not found.")
    return user


def update_profile(db: Session, identity: Identity, data: Payload) -> Dict[str, Any]:
    """
    Partially update the caller's profile.

    Job Seekers touching their niches must send all three of them.
    """
    payload = as_payload(data)
    changes = {field: payload[field] for field in PROFILE_FIELDS if field in payload}

    if identity.role == UserRole.JOB_SEEKER.value:
        niches = [changes.get(field) for field in crud_user.NICHE_FIELDS]
        touched = any(field in changes for field in crud_user.NICHE_FIELDS)
        if touched and any(is_blank(niche) for niche in niches):
            raise ValidationError("Please provide your all preferred job niches.")

    if changes.get("phone") not in (None, ""):
        changes["phone"] = convert_phone_to_number(changes["phone"])
    elif "phone" in changes:
        del changes["phone"]

    user = crud_user.update(db, identity.user_id, changes)
    if user is None:
        raise NotFoundError("User not found.")
    return user


def update_password(db: Session, identity: Identity, old_password: Optional[str], new_password: Optional[str]) -> None:
    if not old_password or not new_password:
        raise ValidationError("Please provide old password and new password.")

    user = crud_user.get_by_id_for_auth(db, identity.user_id)
    if user is None:
        raise NotFoundError("User not found.")

    if not crud_user.compare_password(user, old_password):
        raise ValidationError("Old password is incorrect.")

    errors = (
        ErrorListBuilder()
        .length_between(new_password, 8, 32, "Password must be between 8 and 32 characters")
        .build()
    )
    if errors:
        raise ValidationError(errors)

    crud_user.update(db, identity.user_id, {"password": new_password})
    logger.info(f"Password updated for user {identity.user_id}")
