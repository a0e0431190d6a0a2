import os
import tempfile

# Settings are read at import time; point everything at a scratch directory first
_TMP = tempfile.mkdtemp(prefix="docmanual-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/sessions.db"
os.environ["DATA_FILE"] = os.path.join(_TMP, "db.json")
os.environ["STORAGE_BACKEND"] = "json"
os.environ["JWT_SECRET_KEY"] = "test-secret"
for var in ("GEMINI_API_KEY", "OPENROUTER_API_KEY", "ROOT_USERNAME", "ROOT_PASSWORD"):
	os.environ.pop(var, None)

import pytest
from fastapi.testclient import TestClient

from docmanual.db import Base, engine
from docmanual.main import app
from docmanual.schemas import ROOT_USER_ID, AdminUser, Category, Database, Principal
from docmanual.security import hash_password
from docmanual.services import DocumentationService, get_service
from docmanual.storage import JsonFileStore

ROOT = Principal(id=ROOT_USER_ID, username="root", role="admin")
EDITOR = Principal(id="user-editor", username="ed", role="editor")


@pytest.fixture(scope="session")
def password_hashes():
	return {"rootpass": hash_password("rootpass"), "edpass": hash_password("edpass")}


@pytest.fixture
def store(tmp_path):
	return JsonFileStore(tmp_path / "db.json")


@pytest.fixture
def seeded_store(store, password_hashes):
	store.write_all(Database(
		categories=[Category(name="Core Systems"), Category(name="User Interface")],
		users=[
			AdminUser(id=ROOT_USER_ID, username="root", password=password_hashes["rootpass"], role="admin"),
			AdminUser(id="user-editor", username="ed", password=password_hashes["edpass"], role="editor"),
		],
	))
	return store


@pytest.fixture
def service(seeded_store):
	return DocumentationService(seeded_store)


@pytest.fixture
def client(service):
	Base.metadata.create_all(bind=engine)
	app.dependency_overrides[get_service] = lambda: service
	try:
		yield TestClient(app)
	finally:
		app.dependency_overrides.clear()


def login(client, username, password):
	return client.post("/auth/login", data={"username": username, "password": password})
