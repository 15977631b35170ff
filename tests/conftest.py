import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ML_SERVICE_URL"] = "http://ml-service.test"
os.environ["ML_RETRY_BACKOFF_SECONDS"] = "0"

from fastapi.testclient import TestClient

from hiring_engine.core.config import settings
from hiring_engine.core.exceptions import UpstreamError
from hiring_engine.core.security import create_access_token, get_password_hash
from hiring_engine.database import Base, get_db
from hiring_engine.main import app
from hiring_engine.models.job_description import JobDescription
from hiring_engine.models.resume import Resume
from hiring_engine.models.user import User, UserRole
from hiring_engine.services.ml_client import get_ml_client

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "Secret123!"


class FakeMLClient:
    """Stand-in for MLServiceClient that records calls and can fail on a chosen step."""

    def __init__(self):
        self.calls = []
        self.fail_on = None
        self.fit_score = 78.0
        self.match_details = {
            "matchedSkills": ["Python", "SQL"],
            "missingSkills": ["Kubernetes"],
            "skillOverlap": 66.7,
        }
        self.parsed_resume = {
            "name": "Jane Doe",
            "email": "jane@example.com",
            "skills": ["Python", "SQL", "Docker"],
            "seniority": "Senior",
            "totalYearsExperience": 6,
        }
        self.parsed_jd = {
            "requiredSkills": ["Python", "SQL", "Kubernetes"],
            "optionalSkills": ["Go"],
            "seniority": "Senior",
        }
        self.questions = [
            {"question": "Describe a Kubernetes rollout you owned.", "category": "technical", "difficulty": "hard"},
            "How do you mentor junior engineers?",
        ]

    def _record(self, step, *args):
        self.calls.append((step, args))
        if self.fail_on == step:
            raise UpstreamError(
                f"ML service returned error 502 on /{step}",
                details={"endpoint": step, "upstreamStatus": 502, "upstreamError": "bad gateway"},
            )

    def parse_resume(self, file_path, filename, content_type=None):
        self._record("parse-resume", file_path, filename, content_type)
        return {"extractedText": "Jane Doe\nSenior Python engineer", "parsedData": dict(self.parsed_resume)}

    def parse_jd(self, title, company, description):
        self._record("parse-jd", title, company, description)
        return dict(self.parsed_jd)

    def match(self, resume, job_description):
        self._record("match", resume, job_description)
        return {"fitScore": self.fit_score, "matchDetails": dict(self.match_details)}

    def improve(self, resume, job_description, match_details):
        self._record("improve", resume, job_description, match_details)
        return {
            "recommendations": ["Get hands-on with Kubernetes"],
            "improvementAreas": ["Container orchestration"],
            "estimatedTimeToReady": "2-3 months",
        }

    def interview(self, resume, job_description):
        self._record("interview", resume, job_description)
        return list(self.questions)

    def steps(self):
        return [step for step, _ in self.calls]


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", str(path))
    return path


@pytest.fixture(scope="function")
def db_session():
    """A session per test; every table is emptied afterwards since services commit."""
    session = TestingSessionLocal()
    yield session
    session.rollback()
    session.close()
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def fake_ml():
    return FakeMLClient()


def _make_user(db, email, role=UserRole.RECRUITER, is_active=True):
    user = User(
        email=email,
        hashed_password=get_password_hash(PASSWORD),
        full_name=email.split("@")[0].title(),
        company="Acme",
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def recruiter(db_session):
    return _make_user(db_session, "recruiter@acme.io")


@pytest.fixture
def other_recruiter(db_session):
    return _make_user(db_session, "other@acme.io")


@pytest.fixture
def admin_user(db_session):
    return _make_user(db_session, "admin@acme.io", role=UserRole.ADMIN)


@pytest.fixture
def auth_headers():
    """Helper fixture building bearer headers for a user."""
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}
    return _headers


@pytest.fixture
def make_resume(db_session):
    def _make(owner=None, name="Jane Doe", skills=None, file_path="/nonexistent/resume.pdf"):
        resume = Resume(
            user_id=owner.id if owner else None,
            file_name=f"{name.lower().replace(' ', '_')}.pdf",
            file_path=file_path,
            file_size=1024,
            file_type="application/pdf",
            extracted_text=f"{name} resume text",
            parsed_data={
                "name": name,
                "email": f"{name.split()[0].lower()}@example.com",
                "skills": skills if skills is not None else ["Python", "SQL"],
            },
            status="parsed",
            tags=[],
        )
        db_session.add(resume)
        db_session.commit()
        db_session.refresh(resume)
        return resume
    return _make


@pytest.fixture
def make_job(db_session):
    def _make(owner=None, title="Backend Engineer", required_skills=None, applicants=0, status="active"):
        jd = JobDescription(
            user_id=owner.id if owner else None,
            title=title,
            company="Acme",
            description=f"{title} working on the hiring platform",
            parsed_data={"requiredSkills": required_skills if required_skills is not None else ["Python", "SQL"]},
            status=status,
            applicants=applicants,
            views=0,
            tags=[],
        )
        db_session.add(jd)
        db_session.commit()
        db_session.refresh(jd)
        return jd
    return _make


@pytest.fixture(scope="function")
def client(db_session, fake_ml):
    """A TestClient using the test session and the fake ML client via dependency overrides."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ml_client] = lambda: fake_ml
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
