import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from neurocare import create_app
from neurocare.extensions import db


@pytest.fixture
def app(tmp_path):
    app = create_app("config.TestConfig")
    app.config["LOCAL_STORAGE_DIR"] = str(tmp_path / "storage")
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Service-level tests run inside one app context."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()
