import os
import shutil

import pytest
from fastapi.testclient import TestClient

from core.config import SITE_SCHEMA_FILE
from main import app
from routers import auth as auth_router
from routers.auth import get_users_store
from routers.site_config import get_site_configs_store, get_site_schema
from utils.record_store import RecordStore
from utils.site_schema import SchemaGate


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / "site-config.schema.json"
    shutil.copyfile(SITE_SCHEMA_FILE, path)
    return str(path)


@pytest.fixture
def users_store(tmp_path):
    return RecordStore(os.path.join(tmp_path, "users.json"))


@pytest.fixture
def configs_store(tmp_path):
    return RecordStore(os.path.join(tmp_path, "site-configs.json"))


@pytest.fixture
def client(monkeypatch, users_store, configs_store, schema_path):
    # Minimum bcrypt cost keeps the suite fast
    monkeypatch.setattr(auth_router, "BCRYPT_ROUNDS", 4)
    gate = SchemaGate(schema_path)
    app.dependency_overrides[get_users_store] = lambda: users_store
    app.dependency_overrides[get_site_configs_store] = lambda: configs_store
    app.dependency_overrides[get_site_schema] = lambda: gate
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def minimal_config():
    return {
        "profile": {"websiteName": "Acme"},
        "branding": {"palette": {"colors": ["#fff"]}},
    }
