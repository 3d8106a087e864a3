"""
Configuration partagée pour tous les tests.

- `client` : TestClient avec get_db remplacé par un MagicMock (tests d'API, services patchés)
- `db` : vraie session SQLAlchemy sur SQLite en mémoire (tests de services, contraintes réelles)
- `blob_store` : stockage d'images en mémoire à la place de Cloudinary
"""

import os

# Avant tout import de app : aucune connexion PostgreSQL pendant les tests
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"

import uuid  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.database import Base, get_db  # noqa: E402
from app.exceptions import BlobStoreError  # noqa: E402
from app.main import app  # noqa: E402
from app.models.teacher import Teacher  # noqa: E402
from app.schemas.classroom import ClassroomCreate  # noqa: E402
from app.schemas.contest import ContestCreate  # noqa: E402
from app.services import classroom_service, contest_service  # noqa: E402
from app.services.blob_store import BlobStore, get_blob_store  # noqa: E402
from app.services.identity_service import issue_teacher_token  # noqa: E402


class FakeBlobStore(BlobStore):
    """Stockage en mémoire. `fail_upload_at` fait échouer le N-ième envoi, `fail_delete` toutes les suppressions."""

    def __init__(self):
        self.objects = {}
        self.uploads = 0
        self.fail_upload_at = None
        self.fail_delete = False

    def upload(self, data: bytes, folder: str) -> str:
        self.uploads += 1
        if self.fail_upload_at == self.uploads:
            raise BlobStoreError("Échec de l'enregistrement de l'image.")
        url = f"https://res.cloudinary.com/demo/image/upload/v1/ai-vs-real/{folder}/{self.uploads}.png"
        self.objects[url] = data
        return url

    def delete(self, url: str) -> None:
        if self.fail_delete:
            raise BlobStoreError("Stockage indisponible.")
        self.objects.pop(url, None)


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def client(blob_store):
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def teacher_id():
    return uuid.uuid4()


@pytest.fixture
def auth_headers(teacher_id):
    """En-tête d'authentification enseignant au format attendu par l'API."""
    return {"Authorization": f"Bearer {issue_teacher_token(teacher_id)}"}


# --- Base SQLite réelle ---

@pytest.fixture
def db():
    """Session sur une base SQLite en mémoire, clés étrangères et CASCADE actifs."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def teacher(db):
    t = Teacher(name="Mme Dupont", email="dupont@ecole.be", password_hash="x")
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


@pytest.fixture
def classroom(db, teacher):
    return classroom_service.create_classroom(db, teacher.id, ClassroomCreate(name="6ème A"))


@pytest.fixture
def contest(db, teacher, classroom):
    """Concours STUDENT_UPLOAD en statut SUBMISSION."""
    return contest_service.create_contest(
        db, teacher.id, ContestCreate(title="IA ou réel ?", classroom_id=classroom.id)
    )
