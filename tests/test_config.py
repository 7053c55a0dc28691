# tests/test_config.py

import pytest

from neo4jfluent.config import Neo4jSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("URI", "USERNAME", "PASSWORD", "DATABASE", "LOG_QUERIES", "AUTO_UUID", "LOG_LEVEL"):
        monkeypatch.delenv(f"NEO4J_{name}", raising=False)
    # Keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)


class TestNeo4jSettings:
    def test_defaults(self):
        settings = Neo4jSettings()
        assert settings.uri == "bolt://localhost:7687"
        assert settings.auth == ("neo4j", "password")
        assert settings.database == "neo4j"
        assert settings.log_queries is False
        assert settings.auto_uuid is True
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("NEO4J_URI", "neo4j://graph.internal:7687")
        monkeypatch.setenv("NEO4J_USERNAME", "svc")
        monkeypatch.setenv("NEO4J_PASSWORD", "s3cret")
        monkeypatch.setenv("NEO4J_LOG_QUERIES", "true")
        monkeypatch.setenv("NEO4J_AUTO_UUID", "0")

        settings = Neo4jSettings()

        assert settings.uri == "neo4j://graph.internal:7687"
        assert settings.auth == ("svc", "s3cret")
        assert settings.log_queries is True
        assert settings.auto_uuid is False

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("NEO4J_DATABASE=analytics\nNEO4J_LOG_LEVEL=DEBUG\n")

        settings = Neo4jSettings()

        assert settings.database == "analytics"
        assert settings.log_level == "DEBUG"

    def test_unrelated_variables_ignored(self, monkeypatch):
        monkeypatch.setenv("NEO4J_SOMETHING_ELSE", "x")
        assert Neo4jSettings().uri == "bolt://localhost:7687"
