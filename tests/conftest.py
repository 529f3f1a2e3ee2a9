import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("TESTING", "true")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


TEST_KEY_HEX = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"


@pytest.fixture
def app_context(tmp_path):
    """テーブル作成済みのアプリケーションを提供するfixture"""
    from webapp import create_app
    from webapp.config import TestConfig
    from webapp.extensions import db

    class _Config(TestConfig):
        UPLOAD_DIRECTORY = str(tmp_path / "uploads")
        PDF_ENCRYPTION_KEY = TEST_KEY_HEX

    app = create_app(_Config)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app_context):
    return app_context.test_client()


@pytest.fixture
def make_user(app_context):
    """利用者を作成するファクトリ"""
    from core.db import db
    from core.models.user import User

    counter = {"n": 0}

    def _make(role: str = "student", *, name: str | None = None, email: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"{role.title()} {counter['n']}",
            email=email or f"{role}{counter['n']}@example.com",
            role=role,
            is_approved=True,
        )
        user.set_password("password123")
        db.session.add(user)
        db.session.commit()
        return user

    return _make


def login_as(client, user) -> None:
    """Flask-Loginのセッションに利用者を設定する

    app_contextを保持したままリクエストするため、Flask-Loginが
    gにキャッシュした利用者も破棄する。
    """
    from flask import g

    g.pop("_login_user", None)

    with client.session_transaction() as sess:
        sess["_user_id"] = str(user.id)
        sess["_fresh"] = True


@pytest.fixture
def login():
    return login_as
