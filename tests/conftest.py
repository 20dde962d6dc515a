import io
from unittest.mock import Mock

import pytest
from PIL import Image

import config
from api.auth import SessionPayload, make_session_token
from db import get_session, init_db


@pytest.fixture(autouse=True)
def public_dir(tmp_path, monkeypatch):
    """Point the public asset tree at a temporary directory."""
    p = tmp_path / "public"
    p.mkdir()
    monkeypatch.setattr(config, "PUBLIC_DIR", p)
    monkeypatch.setattr(config, "IMAGE_SEARCH_DIRS",
                        [p / "images", p / "source-images", p])
    monkeypatch.setattr(config, "KEEP_UNRESOLVED_PUBLIC_PATHS", False)
    return p


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test.sqlite'}"


@pytest.fixture
def session(db_url):
    init_db(db_url)
    s = get_session()
    yield s
    s.close()


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (4, 3), "red").save(buf, "PNG")
    return buf.getvalue()


@pytest.fixture
def png_response(png_bytes):
    """A successful requests.get() response carrying a PNG."""
    resp = Mock()
    resp.status_code = 200
    resp.headers = {"Content-Type": "image/png"}
    resp.content = png_bytes
    return resp


@pytest.fixture
def app(db_url, monkeypatch):
    monkeypatch.setattr(config, "DB_URL", db_url)
    from main import create_app
    flask_app = create_app()
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    c = app.test_client()
    token = make_session_token(SessionPayload(id=1, email="admin@example.com", role="ADMIN"))
    c.set_cookie(config.SESSION_COOKIE, token)
    return c
