from typing import Optional

from pydantic import Field

from app.schemas.base import CamelModel


class JobCreateRequest(CamelModel):
    """Schema for posting a job. postedBy always comes from the caller's identity."""
    title: Optional[str] = None
    job_type: Optional[str] = Field(None, description='"Full-time" or "Part-time"')
    location: Optional[str] = None
    company_name: Optional[str] = None
    introduction: Optional[str] = None
    responsibilities: Optional[str] = None
    qualifications: Optional[str] = None
    offers: Optional[str] = None
    salary: Optional[str] = None
    hiring_multiple_candidates: Optional[str] = Field(None, description='"Yes" or "No"')
    personal_website_title: Optional[str] = None
    personal_website_url: Optional[str] = None
    job_niche: Optional[str] = None
