import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_SECRET", "test-secret")
os.environ.setdefault("LOGIN_USERNAME", "admin")

import pytest
from fastapi.testclient import TestClient

from escola.core.config import settings
from escola.core.security import sign
from escola.db.base import Base
from escola.db.session import SessionLocal, engine
from escola.main import app


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db(client):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def auth():
    token = sign({"sub": "admin", "role": "admin"}, settings.AUTH_SECRET, ttl_seconds=3600)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def api(client, auth):
    """TestClient that always sends the bearer token."""
    client.headers.update(auth)
    return client


@pytest.fixture()
def make(api):
    """Small factory over the HTTP API for building fixtures."""

    class Make:
        def _post(self, path, body):
            r = api.post(path, json=body)
            assert r.status_code == 201, r.text
            return r.json()

        def teacher(self, name="Maria Santos", email=None, **kw):
            email = email or name.lower().replace(" ", ".") + "@escola.test"
            return self._post("/teachers", {"full_name": name, "email": email, **kw})

        def subject(self, name="Matemática", code=None, workload_minutes=None, **kw):
            return self._post(
                "/subjects",
                {"name": name, "code": code or name[:3].upper(), "workload_minutes": workload_minutes, **kw},
            )

        def school_class(self, name="9º A", year=2024, room="Sala 12", **kw):
            return self._post("/classes", {"name": name, "year": year, "room": room, **kw})

        def assignment(self, teacher_id, subject_id, class_id):
            return self._post(
                "/teacher-subjects",
                {"teacher_id": teacher_id, "subject_id": subject_id, "class_id": class_id},
            )

        def student(self, name, registration, class_id=None, **kw):
            return self._post(
                "/students",
                {"full_name": name, "registration_number": registration, "class_id": class_id, **kw},
            )

        def bimesters(self, year=2024):
            out = []
            for n in range(1, 5):
                out.append(
                    self._post(
                        "/grading-periods",
                        {
                            "academic_year": year,
                            "period_number": n,
                            "name": f"{n}º Bimestre",
                            "start_date": f"{year}-0{2 * n - 1}-01",
                            "end_date": f"{year}-0{2 * n}-28",
                        },
                    )
                )
            return out

    return Make()
