import os
import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# Base SQLite pour les tests, AVANT d'importer l'app
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

import pytest
from fastapi.testclient import TestClient

from tasklist.core.database import Base, SessionLocal, engine
from tasklist.core.security import create_access_token
from tasklist.main import app
from tasklist.models.user import User, ROLE_ADMIN


@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB avant/après chaque test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """Client de test FastAPI"""
    return TestClient(app)


@pytest.fixture
def db():
    """Session DB pour les tests"""
    db = SessionLocal()
    yield db
    db.close()


def make_user(db, email: str, role: str = "user", name: str = None) -> User:
    user = User(email=email, name=name, role=role)
    user.set_password("password123")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return make_user(db, "test@example.com", name="Tester")


@pytest.fixture
def auth_token(user):
    return create_access_token(user.id, user.email)


@pytest.fixture
def auth_headers(auth_token):
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role=ROLE_ADMIN, name="Admin")


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {create_access_token(admin.id, admin.email)}"}


@pytest.fixture
def other_headers(db):
    """Token d'un second utilisateur, pour vérifier le cloisonnement"""
    other = make_user(db, "other@example.com")
    return {"Authorization": f"Bearer {create_access_token(other.id, other.email)}"}
