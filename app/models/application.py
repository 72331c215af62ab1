"""
Application model.

An application snapshots the job seeker's contact details and the job title
at the time of applying. Each party hides it independently through its own
soft-delete flag.
"""

import uuid
from sqlalchemy import BigInteger, Boolean, Column, DateTime, Enum, ForeignKey, String, Text, Uuid, false, func
from app.core.database import Base
from app.models.user import UserRole, enum_values


class Application(Base):
    __tablename__ = "applications"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Job Seeker snapshot
    job_seeker_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    job_seeker_name = Column(String(255), nullable=False)
    job_seeker_email = Column(String(255), nullable=False)
    job_seeker_phone = Column(BigInteger, nullable=False)
    job_seeker_address = Column(Text, nullable=False)
    resume_public_id = Column(String(255), nullable=True)
    resume_url = Column(String(255), nullable=True)
    cover_letter = Column(Text, nullable=False)
    job_seeker_role = Column(
        Enum(UserRole, name="application_role_enum", values_callable=enum_values),
        nullable=False,
        default=UserRole.JOB_SEEKER,
    )

    # Employer (denormalized from the job)
    employer_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    employer_role = Column(
        Enum(UserRole, name="application_role_enum", values_callable=enum_values),
        nullable=False,
        default=UserRole.EMPLOYER,
    )

    # Job snapshot
    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    job_title = Column(String(255), nullable=False)

    # Soft-delete flags, one per party
    deleted_by_job_seeker = Column(Boolean, default=False, server_default=false(), nullable=False)
    deleted_by_employer = Column(Boolean, default=False, server_default=false(), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Application(id={self.id}, job_id={self.job_id}, job_seeker={self.job_seeker_user_id})>"
