import enum
import uuid
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String, Text, Uuid, false, func
from app.core.database import Base
from app.models.user import enum_values


class JobType(str, enum.Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"


class HiringMultiple(str, enum.Enum):
    YES = "Yes"
    NO = "No"


class Job(Base):
    """
    A job posting owned by exactly one Employer.

    newsletters_sent flips to true once the newsletter run has mailed the
    matching job seekers.
    """
    __tablename__ = "jobs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    job_type = Column(
        Enum(JobType, name="job_type_enum", values_callable=enum_values),
        nullable=False,
    )
    location = Column(String(255), nullable=False)
    company_name = Column(String(255), nullable=False)
    introduction = Column(Text, nullable=True)
    responsibilities = Column(Text, nullable=False)
    qualifications = Column(Text, nullable=False)
    offers = Column(Text, nullable=True)
    salary = Column(String(255), nullable=False)
    hiring_multiple_candidates = Column(
        Enum(HiringMultiple, name="hiring_multiple_enum", values_callable=enum_values),
        default=HiringMultiple.NO,
        server_default=HiringMultiple.NO.value,
    )
    personal_website_title = Column(String(255), nullable=True)
    personal_website_url = Column(String(255), nullable=True)
    job_niche = Column(String(255), nullable=False, index=True)

    newsletters_sent = Column(Boolean, default=False, server_default=false(), nullable=False)

    job_posted_on = Column(DateTime(timezone=True), server_default=func.now())
    posted_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', niche='{self.job_niche}')>"
