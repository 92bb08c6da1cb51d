from workforce_api import create_app
from workforce_api.extensions import db, normalize_db_url


def test_database_override_beats_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    target = f"sqlite:///{tmp_path / 'override.db'}"
    app = create_app(overrides={"TESTING": True, "SQLALCHEMY_DATABASE_URI": target})

    assert app.config["SQLALCHEMY_DATABASE_URI"] == target
    with app.app_context():
        assert str(db.engine.url) == target


def test_environment_used_without_override(monkeypatch, tmp_path):
    target = f"sqlite:///{tmp_path / 'env.db'}"
    monkeypatch.setenv("DATABASE_URL", target)
    app = create_app(overrides={"TESTING": True})
    assert app.config["SQLALCHEMY_DATABASE_URI"] == target


def test_normalize_db_url():
    assert normalize_db_url("postgres://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
    assert normalize_db_url("postgresql://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
    assert normalize_db_url("sqlite:///x.db") == "sqlite:///x.db"
