from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from secure_labs.types import LabName
from secure_labs.web.app import create_app
from secure_labs.web.config import LabConfig
from secure_labs.web.dependencies import create_dependencies
from secure_labs.web.sessions import User, UserStore, hash_password

TEST_PASSWORD = "password123"


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """Root directory for the canonicalization lab, created on demand."""
    return tmp_path / "files"


@pytest.fixture
def secret_file(tmp_path: Path) -> Path:
    """A file next to the base directory that must never be readable."""
    path = tmp_path / "secret.txt"
    path.write_text("top secret\n")
    return path


@pytest.fixture
def lab_config(base_dir):
    return LabConfig(lab=LabName.CANONICALIZATION, base_dir=base_dir)


@pytest.fixture
def test_app(lab_config):
    """Canonicalization lab with the insecure route left unmounted."""
    app = create_app(create_dependencies(lab_config))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def insecure_app(base_dir):
    """Canonicalization lab with the insecure demo route mounted."""
    config = LabConfig(lab=LabName.CANONICALIZATION, base_dir=base_dir, insecure_demo=True)
    app = create_app(create_dependencies(config))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def user_store():
    # Minimum bcrypt cost keeps the tests fast
    return UserStore([User(id=1, username="student", password_hash=hash_password(TEST_PASSWORD, rounds=4))], rounds=4)


@pytest.fixture
def auth_app(tmp_path, user_store):
    config = LabConfig(lab=LabName.AUTH, port=3001, base_dir=tmp_path / "unused")
    app = create_app(create_dependencies(config, user_store=user_store))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def access_app(tmp_path):
    config = LabConfig(lab=LabName.ACCESS_CONTROL, port=3000, base_dir=tmp_path / "unused")
    app = create_app(create_dependencies(config))
    with TestClient(app) as client:
        yield client
