from typing import Optional, Union

from pydantic import EmailStr

from app.schemas.base import CamelModel


class ApplicationCreateRequest(CamelModel):
    """Contact details a job seeker submits with an application."""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[Union[int, str]] = None
    address: Optional[str] = None
    cover_letter: Optional[str] = None
