import json

import pytest
from pytest_mock import MockerFixture

from classbook import create_app
from classbook.config import TestingConfig
from classbook.constants import STORE_GITHUB, STORE_LOCAL


def make_config(**overrides):
    return type("TestConfig", (TestingConfig,), overrides)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "data" / "attendance.json"


@pytest.fixture
def app(store_path, make_app):
    app = make_app(ATTENDANCE_STORE=STORE_LOCAL, LOCAL_STORE_PATH=str(store_path))

    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def github_config():
    return {
        "ATTENDANCE_STORE": STORE_GITHUB,
        "GITHUB_API_URL": "https://api.github.com",
        "GITHUB_REPO": "school/classbook-data",
        "GITHUB_TOKEN": "ghp_testtoken1234",
        "GITHUB_FILE_PATH": "daten/anwesenheit.json",
        "GITHUB_BRANCH": None,
        "GITHUB_COMMIT_MESSAGE": "Update attendance list via app",
        "GITHUB_TIMEOUT_SECONDS": 10,
    }


@pytest.fixture
def mock_github_request(mocker: MockerFixture):
    """Patch the HTTP call made by the GitHub client. The default answer is a 404."""
    return mocker.patch(
        "classbook.integrations.github.client.requests.request",
        return_value=mocker.Mock(status_code=404),
    )


@pytest.fixture
def make_app():
    def _make_app(**overrides):
        return create_app(make_config(**overrides))

    return _make_app


@pytest.fixture
def github_app(mock_github_request, github_config, make_app):
    app = make_app(**github_config)

    with app.app_context():
        yield app


@pytest.fixture
def write_document(store_path):
    def _write(data):
        store_path.parent.mkdir(parents=True, exist_ok=True)
        store_path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")

    return _write
