"""
Tests for the use-case services.

Tests:
- Registration, login and token authentication
- Profile and password changes
- Job posting rules (role, ownership)
- Application submission, listings and deletion
"""

import uuid
from datetime import timedelta

import pydantic
import pytest
from jose import ExpiredSignatureError, JWTError

from app.core.errors import (
    AuthError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.core.phone import PhoneNumberError
from app.core.security import Identity, create_access_token
from app.crud import application as crud_application
from app.crud import user as crud_user
from app.schemas.application import ApplicationCreateRequest
from app.schemas.job import JobCreateRequest
from app.schemas.user import UserRegisterRequest, UserUpdateRequest
from app.services import application_service, job_service, user_service


def registration(**overrides):
    data = {
        "name": "Neha Gupta",
        "email": "neha@example.com",
        "phone": "9123456780",
        "address": "Jaipur",
        "password": "password1",
        "role": "Job Seeker",
        "firstNiche": "Software",
        "secondNiche": "Data",
        "thirdNiche": "Cloud",
    }
    data.update(overrides)
    return data


class TestRegister:

    def test_register_job_seeker(self, db_session):
        result = user_service.register(db_session, registration())

        assert result["user"]["email"] == "neha@example.com"
        assert result["user"]["phone"] == 9123456780
        assert "password" not in result["user"]
        assert result["token"]

    def test_register_from_schema(self, db_session):
        request = UserRegisterRequest(**registration(role="Employer", email="boss@example.com"))

        result = user_service.register(db_session, request)

        assert result["user"]["role"] == "Employer"
        assert result["user"]["firstNiche"] is None

    def test_schema_rejects_malformed_email(self):
        with pytest.raises(pydantic.ValidationError):
            UserRegisterRequest(**registration(email="neha..gupta@example.com"))
        with pytest.raises(pydantic.ValidationError):
            ApplicationCreateRequest(email="asha@-bad-.com")

    def test_all_validation_messages_reported(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            user_service.register(db_session, registration(name="Al", password="short"))
        assert exc_info.value.messages == [
            "Name must be between 3 and 30 characters",
            "Password must be between 8 and 32 characters",
        ]

    def test_duplicate_email(self, db_session, job_seeker):
        with pytest.raises(ConflictError) as exc_info:
            user_service.register(db_session, registration(email=job_seeker["email"]))
        assert exc_info.value.message == "Email is already registered."


class TestLoginAndAuthenticate:

    def test_login(self, db_session, job_seeker):
        result = user_service.login(db_session, job_seeker["email"], "secret123", "Job Seeker")

        assert result["user"]["id"] == job_seeker["id"]
        assert "password" not in result["user"]

    def test_missing_fields(self, db_session):
        with pytest.raises(ValidationError):
            user_service.login(db_session, "a@example.com", "", "Job Seeker")

    @pytest.mark.parametrize("email, password", [
        ("asha@example.com", "wrong-password"),
        ("nobody@example.com", "secret123"),
    ])
    def test_bad_credentials(self, db_session, job_seeker, email, password):
        with pytest.raises(AuthError) as exc_info:
            user_service.login(db_session, email, password, "Job Seeker")
        assert exc_info.value.message == "Invalid email or password."

    def test_wrong_role(self, db_session, job_seeker):
        with pytest.raises(AuthError) as exc_info:
            user_service.login(db_session, job_seeker["email"], "secret123", "Employer")
        assert exc_info.value.message == "Invalid user role."

    def test_authenticate(self, db_session, employer):
        token = create_access_token(employer["id"])
        identity = user_service.authenticate(db_session, token)
        assert identity == Identity(user_id=employer["id"], role="Employer")

    def test_missing_token(self, db_session):
        with pytest.raises(AuthError):
            user_service.authenticate(db_session, None)

    def test_expired_token_propagates(self, db_session, employer):
        token = create_access_token(employer["id"], expires_delta=timedelta(minutes=-1))
        with pytest.raises(ExpiredSignatureError):
            user_service.authenticate(db_session, token)

    def test_tampered_token_propagates(self, db_session, employer):
        token = create_access_token(employer["id"]) + "x"
        with pytest.raises(JWTError):
            user_service.authenticate(db_session, token)

    def test_deleted_user(self, db_session, employer):
        token = create_access_token(employer["id"])
        crud_user.delete(db_session, employer["id"])
        with pytest.raises(NotFoundError):
            user_service.authenticate(db_session, token)


class TestProfile:

    def test_get_profile(self, db_session, job_seeker, identity_of):
        assert user_service.get_profile(db_session, identity_of(job_seeker)) == job_seeker

    def test_update_profile_normalizes_phone(self, db_session, job_seeker, identity_of):
        updated = user_service.update_profile(
            db_session, identity_of(job_seeker), UserUpdateRequest(phone="7012345678", address="Goa")
        )
        assert updated["phone"] == 7012345678
        assert updated["address"] == "Goa"

    def test_update_profile_rejects_bad_phone(self, db_session, job_seeker, identity_of):
        with pytest.raises(PhoneNumberError):
            user_service.update_profile(db_session, identity_of(job_seeker), {"phone": "12345"})

    def test_job_seeker_must_send_all_niches(self, db_session, job_seeker, identity_of):
        with pytest.raises(ValidationError):
            user_service.update_profile(db_session, identity_of(job_seeker), {"firstNiche": "AI"})

    def test_job_seeker_replaces_niches(self, db_session, job_seeker, identity_of):
        niches = {"firstNiche": "AI", "secondNiche": "Cloud", "thirdNiche": "Security"}
        updated = user_service.update_profile(db_session, identity_of(job_seeker), niches)
        assert (updated["firstNiche"], updated["secondNiche"], updated["thirdNiche"]) == ("AI", "Cloud", "Security")

    def test_role_cannot_be_changed_through_profile(self, db_session, job_seeker, identity_of):
        updated = user_service.update_profile(
            db_session, identity_of(job_seeker), {"role": "Employer", "name": "Asha V"}
        )
        assert updated["role"] == "Job Seeker"

    def test_update_password(self, db_session, job_seeker, identity_of):
        user_service.update_password(db_session, identity_of(job_seeker), "secret123", "brand-new-pass")
        result = user_service.login(db_session, job_seeker["email"], "brand-new-pass", "Job Seeker")
        assert result["user"]["id"] == job_seeker["id"]

    def test_update_password_checks_old_password(self, db_session, job_seeker, identity_of):
        with pytest.raises(ValidationError) as exc_info:
            user_service.update_password(db_session, identity_of(job_seeker), "wrong-one", "brand-new-pass")
        assert exc_info.value.message == "Old password is incorrect."

    def test_update_password_length(self, db_session, job_seeker, identity_of):
        with pytest.raises(ValidationError):
            user_service.update_password(db_session, identity_of(job_seeker), "secret123", "short")


class TestJobService:

    def posting(self, **overrides):
        data = {
            "title": "Site Reliability Engineer",
            "jobType": "Full-time",
            "location": "Bengaluru",
            "companyName": "Acme Corp",
            "responsibilities": "Keep things running",
            "qualifications": "Linux",
            "salary": "25 LPA",
            "jobNiche": "Cloud",
        }
        data.update(overrides)
        return data

    def test_post_job_uses_caller_as_owner(self, db_session, employer, identity_of):
        job = job_service.post_job(db_session, identity_of(employer), JobCreateRequest(**self.posting()))
        assert job["postedBy"] == employer["id"]
        assert job["hiringMultipleCandidates"] == "No"

    def test_only_employers_post(self, db_session, job_seeker, identity_of):
        with pytest.raises(AuthorizationError):
            job_service.post_job(db_session, identity_of(job_seeker), self.posting())

    def test_post_job_validation(self, db_session, employer, identity_of):
        with pytest.raises(ValidationError) as exc_info:
            job_service.post_job(db_session, identity_of(employer), self.posting(title="", jobType="Temp"))
        assert len(exc_info.value.messages) == 2

    def test_list_jobs(self, db_session, employer, identity_of):
        identity = identity_of(employer)
        job_service.post_job(db_session, identity, self.posting())
        job_service.post_job(db_session, identity, self.posting(title="Analyst", location="Pune", jobNiche="Data"))

        assert len(job_service.list_jobs(db_session)) == 2
        assert [job["title"] for job in job_service.list_jobs(db_session, city="bengal")] == [
            "Site Reliability Engineer"
        ]
        assert [job["title"] for job in job_service.list_jobs(db_session, niche="Data")] == ["Analyst"]
        assert [job["title"] for job in job_service.list_jobs(db_session, search_keyword="reliab")] == [
            "Site Reliability Engineer"
        ]

    def test_get_my_jobs(self, db_session, employer, job, job_seeker, identity_of):
        assert [mine["id"] for mine in job_service.get_my_jobs(db_session, identity_of(employer))] == [job["id"]]
        with pytest.raises(AuthorizationError):
            job_service.get_my_jobs(db_session, identity_of(job_seeker))

    def test_get_job(self, db_session, job):
        assert job_service.get_job(db_session, job["id"])["poster"]["role"] == "Employer"
        with pytest.raises(NotFoundError):
            job_service.get_job(db_session, uuid.uuid4())

    def test_delete_job_owner_only(self, db_session, job, make_user, identity_of, employer):
        intruder = make_user(email="other@example.com", role="Employer")
        with pytest.raises(AuthorizationError):
            job_service.delete_job(db_session, identity_of(intruder), job["id"])

        job_service.delete_job(db_session, identity_of(employer), job["id"])
        with pytest.raises(NotFoundError):
            job_service.delete_job(db_session, identity_of(employer), job["id"])


class TestApplicationService:

    def apply(self, db_session, job_seeker, job, identity_of, **overrides):
        data = {
            "name": job_seeker["name"],
            "email": job_seeker["email"],
            "phone": "9876543210",
            "address": job_seeker["address"],
            "coverLetter": "Please consider me.",
        }
        data.update(overrides)
        return application_service.submit_application(
            db_session, identity_of(job_seeker), job["id"], ApplicationCreateRequest(**data)
        )

    def test_submit(self, db_session, job_seeker, job, employer, identity_of):
        crud_user.update(db_session, job_seeker["id"], {"resumeUrl": "https://cdn.example.com/cv.pdf"})

        application = self.apply(db_session, job_seeker, job, identity_of)

        assert application["employerUserId"] == employer["id"]
        assert application["jobTitle"] == job["title"]
        assert application["jobSeekerPhone"] == 9876543210
        assert application["resumeUrl"] == "https://cdn.example.com/cv.pdf"

    def test_duplicate_application(self, db_session, job_seeker, job, identity_of):
        self.apply(db_session, job_seeker, job, identity_of)
        with pytest.raises(ConflictError) as exc_info:
            self.apply(db_session, job_seeker, job, identity_of)
        assert exc_info.value.message == "You have already applied for this job."

    def test_can_reapply_after_deleting(self, db_session, job_seeker, job, identity_of):
        first = self.apply(db_session, job_seeker, job, identity_of)
        application_service.delete_application(db_session, identity_of(job_seeker), first["id"])

        second = self.apply(db_session, job_seeker, job, identity_of)
        assert second["id"] != first["id"]

    def test_only_job_seekers_apply(self, db_session, employer, job, identity_of):
        with pytest.raises(AuthorizationError):
            application_service.submit_application(db_session, identity_of(employer), job["id"], {})

    def test_job_must_exist(self, db_session, job_seeker, identity_of):
        with pytest.raises(NotFoundError):
            application_service.submit_application(db_session, identity_of(job_seeker), uuid.uuid4(), {})

    def test_validation(self, db_session, job_seeker, job, identity_of):
        with pytest.raises(ValidationError) as exc_info:
            self.apply(db_session, job_seeker, job, identity_of, coverLetter="", phone="555")
        assert "Cover letter is required" in exc_info.value.messages

    def test_listings_are_role_gated(self, db_session, job_seeker, employer, job, identity_of):
        self.apply(db_session, job_seeker, job, identity_of)

        assert len(application_service.employer_applications(db_session, identity_of(employer))) == 1
        assert len(application_service.job_seeker_applications(db_session, identity_of(job_seeker))) == 1
        with pytest.raises(AuthorizationError):
            application_service.employer_applications(db_session, identity_of(job_seeker))
        with pytest.raises(AuthorizationError):
            application_service.job_seeker_applications(db_session, identity_of(employer))

    def test_delete_requires_ownership(self, db_session, job_seeker, job, make_user, identity_of):
        application = self.apply(db_session, job_seeker, job, identity_of)
        stranger = make_user(email="stranger@example.com")

        with pytest.raises(AuthorizationError):
            application_service.delete_application(db_session, identity_of(stranger), application["id"])

    def test_both_sides_delete(self, db_session, job_seeker, employer, job, identity_of):
        application = self.apply(db_session, job_seeker, job, identity_of)

        application_service.delete_application(db_session, identity_of(employer), application["id"])
        application_service.delete_application(db_session, identity_of(job_seeker), application["id"])

        assert crud_application.get_by_id(db_session, application["id"]) is None
        with pytest.raises(NotFoundError):
            application_service.delete_application(db_session, identity_of(job_seeker), application["id"])
