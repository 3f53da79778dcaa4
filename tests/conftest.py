import pytest
from fastapi.testclient import TestClient
import db
from app import app, get_mutations

WEBHOOK_TOKEN = "test-verify-token"


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'akademyx.db'}")
    monkeypatch.setenv("WHATSAPP_WEBHOOK_TOKEN", WEBHOOK_TOKEN)
    monkeypatch.setenv("WHATSAPP_SEND_DELAY", "0")
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session(client):
    sess = db.SessionLocal()
    try:
        yield sess
    finally:
        sess.close()


@pytest.fixture
def failing_mutations(client):
    """Make every mutation call blow up the way an unreachable database would."""
    from errors import UpstreamError

    class FailingMutations:
        def atomic(self):
            raise UpstreamError("connection refused")

        def __getattr__(self, name):
            def fail(*args, **kwargs):
                raise UpstreamError("connection refused")
            return fail

    app.dependency_overrides[get_mutations] = lambda: FailingMutations()
    yield
    app.dependency_overrides.pop(get_mutations, None)


def application_payload(**overrides):
    payload = {
        "firstName": "Ada",
        "lastName": "Okafor",
        "email": "ada@example.com",
        "phone": "08012345678",
        "age": "24",
        "occupation": "Student",
        "location": "Lagos",
        "motivation": "I want to build a career in prompt engineering and community work.",
        "experience": "Two years volunteering with local youth groups.",
        "goals": "Earn all three certifications and start a small online business.",
    }
    payload.update(overrides)
    return payload
