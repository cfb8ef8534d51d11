"""Tests for configuration and sources loading."""

import pytest
from pydantic import ValidationError

from lexfeed.config import (
    Config,
    ConfigModel,
    JudgmentsConfig,
    SourceConfig,
    load_config,
    load_sources,
    save_config,
    save_sources,
)
from lexfeed.config.models import MAX_FULL_TEXT_CHARS
from lexfeed.db.init import SCHEMA_SQL
from lexfeed.exceptions import ConfigurationError
from lexfeed.models import FeedType


def test_defaults():
    config = ConfigModel()

    assert config.http.timeout_seconds == 30.0
    assert config.judgments.days_back == 30
    assert config.enrichment.classify_batch_size == 10
    assert config.enrichment.summarize_batch_size == 5
    assert config.relevance.half_life_hours["judgment"] == 120.0


def test_round_trip(tmp_path):
    path = tmp_path / "config.yaml"
    save_config(ConfigModel(postgres={"database": "lexfeed_test"}, judgments={"days_back": 7}), path)

    loaded = load_config(path)

    assert loaded.postgres.database == "lexfeed_test"
    assert loaded.judgments.days_back == 7


def test_missing_config(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("postgres: [unclosed")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_invalid_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("relevance:\n  half_life_hours:\n    news: -1\n")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path) == ConfigModel()


def test_sources_round_trip_and_invalid_entries(tmp_path):
    path = tmp_path / "sources.yaml"
    save_sources(
        [SourceConfig(name="Regulator", url="https://reg.example/rss", feed_type=FeedType.REGULATORY)],
        path,
    )
    path.write_text(
        path.read_text()
        + "- name: Bad kind\n  url: https://x.example/rss\n  feed_type: judgment\n"
        + "- name: No url\n  feed_type: news\n"
    )

    sources = load_sources(path)

    assert [s.name for s in sources] == ["Regulator"]
    assert sources[0].feed_type == FeedType.REGULATORY
    assert sources[0].enabled is True


def test_sources_file_without_sources_key(tmp_path):
    path = tmp_path / "sources.yaml"
    path.write_text("{}\n")
    assert load_sources(path) == []


def test_secrets_come_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("TEST_DB_PASSWORD", "s3cret")
    monkeypatch.setenv("TEST_LLM_KEY", "sk-test")
    model = ConfigModel(postgres={"password_env": "TEST_DB_PASSWORD"}, llm={"api_key_env": "TEST_LLM_KEY"})
    config = Config.from_model(model, tmp_path / "config.yaml")

    assert config.get_db_config()["password"] == "s3cret"
    assert config.get_llm_config()["api_key"] == "sk-test"
    assert config.sources_path == tmp_path / "sources.yaml"


def test_unset_secret_env_leaves_value_alone(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    config = Config.from_model(ConfigModel(), tmp_path / "config.yaml")

    assert config.get_llm_config()["api_key"] is None


def test_full_text_cap_cannot_exceed_stored_limit(tmp_path):
    assert JudgmentsConfig(max_full_text_chars=MAX_FULL_TEXT_CHARS).max_full_text_chars == 50000
    with pytest.raises(ValidationError):
        JudgmentsConfig(max_full_text_chars=60000)

    path = tmp_path / "config.yaml"
    path.write_text("judgments:\n  max_full_text_chars: 60000\n")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_full_text_cap_matches_schema_check():
    assert f"length(full_text) <= {MAX_FULL_TEXT_CHARS}" in SCHEMA_SQL
