"""
Pydantic schemas for user registration and profile updates.

Fields are deliberately lenient (all optional): rule checking happens in
validate_user_data so every violated rule is reported together. Only the
email syntax is checked here, with EmailStr.
"""

from typing import Optional, Union

from pydantic import EmailStr, Field

from app.schemas.base import CamelModel


class UserRegisterRequest(CamelModel):
    """Request schema for user registration."""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[Union[int, str]] = Field(None, description="10-digit Indian mobile number")
    address: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = Field(None, description='"Job Seeker" or "Employer"')
    first_niche: Optional[str] = None
    second_niche: Optional[str] = None
    third_niche: Optional[str] = None
    cover_letter: Optional[str] = None
    resume_public_id: Optional[str] = None
    resume_url: Optional[str] = None


class UserUpdateRequest(CamelModel):
    """Profile update; only the fields sent are changed."""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[Union[int, str]] = None
    address: Optional[str] = None
    cover_letter: Optional[str] = None
    first_niche: Optional[str] = None
    second_niche: Optional[str] = None
    third_niche: Optional[str] = None
    resume_public_id: Optional[str] = None
    resume_url: Optional[str] = None
