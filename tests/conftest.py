import os
import sys

import pytest


# Ensure the repository root is on sys.path for `from chessai...` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)


@pytest.fixture
def app():
    from chessai.config import Settings
    from chessai.protocol.http.app import create_app

    return create_app(Settings(log_level="WARNING"))


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)
