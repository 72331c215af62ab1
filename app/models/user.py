"""
User model for job seekers and employers.

Job seekers carry three niche tags used by the newsletter; employers leave
them null.
"""

import enum
import uuid
from sqlalchemy import BigInteger, Column, DateTime, Enum, String, Text, Uuid, func
from app.core.database import Base


class UserRole(str, enum.Enum):
    JOB_SEEKER = "Job Seeker"
    EMPLOYER = "Employer"


def enum_values(enum_class):
    """Persist enum values ("Job Seeker"), not member names (JOB_SEEKER)."""
    return [member.value for member in enum_class]


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(30), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(BigInteger, nullable=False)
    address = Column(Text, nullable=False)

    # Newsletter preferences (Job Seekers only)
    first_niche = Column(String(255), nullable=True)
    second_niche = Column(String(255), nullable=True)
    third_niche = Column(String(255), nullable=True)

    # bcrypt digest, never returned by response-facing reads
    password = Column(String(255), nullable=False)

    resume_public_id = Column(String(255), nullable=True)
    resume_url = Column(String(255), nullable=True)
    cover_letter = Column(Text, nullable=True)

    role = Column(
        Enum(UserRole, name="user_role_enum", values_callable=enum_values),
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
