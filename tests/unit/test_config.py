"""Unit tests for configuration loading."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from inkwell.config.loader import _substitute_env_vars, get_default_config_path, load_config
from inkwell.config.schema import AppConfig, IngestionConfig, LogLevel

CONFIG_TOML = """
content_dir = "${SITE_ROOT:-site/content}"

[ingestion]
extensions = ["md", ".Markdown"]
max_workers = 4

[listing]
words_per_minute = 250

[profiles.ci]
ingestion = { fail_fast = true }
logging = { level = "WARNING", json_logs = true }
"""


@pytest.fixture
def config_file(tmp_path) -> Path:
    path = tmp_path / "inkwell.toml"
    path.write_text(CONFIG_TOML, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SITE_ROOT", "INKWELL_CONTENT_DIR", "INKWELL_INGESTION__MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = AppConfig()

    assert config.content_dir == Path("content")
    assert config.ingestion.extensions == [".md", ".markdown"]
    assert config.ingestion.fail_fast is False
    assert config.listing.include_drafts is False
    assert config.logging.level == LogLevel.INFO


def test_load_from_file(config_file):
    config = load_config(config_file)

    assert config.content_dir == Path("site/content")
    assert config.ingestion.extensions == [".md", ".markdown"]
    assert config.ingestion.max_workers == 4
    assert config.listing.words_per_minute == 250
    assert config.ingestion.fail_fast is False


def test_profile_overrides_base(config_file):
    config = load_config(config_file, profile="ci")

    assert config.ingestion.fail_fast is True
    assert config.logging.level == LogLevel.WARNING
    assert config.logging.json_logs is True
    # Keys the profile leaves alone keep their base-file values
    assert config.ingestion.max_workers == 4
    assert config.ingestion.extensions == [".md", ".markdown"]
    assert config.listing.words_per_minute == 250


def test_unknown_profile_is_ignored(config_file):
    config = load_config(config_file, profile="staging")
    assert config.ingestion.max_workers == 4


def test_env_var_substitution(config_file, monkeypatch):
    monkeypatch.setenv("SITE_ROOT", "/srv/blog/content")
    config = load_config(config_file)
    assert config.content_dir == Path("/srv/blog/content")


def test_environment_overrides_file(config_file, monkeypatch):
    monkeypatch.setenv("INKWELL_INGESTION__MAX_WORKERS", "2")
    config = load_config(config_file)

    assert config.ingestion.max_workers == 2
    # Other values from the same section still come from the file
    assert config.ingestion.extensions == [".md", ".markdown"]


def test_env_file(tmp_path, config_file):
    env_file = tmp_path / ".env"
    env_file.write_text("INKWELL_CONTENT_DIR=/from/dotenv\n", encoding="utf-8")

    try:
        config = load_config(config_file, env_file=env_file)
    finally:
        # load_dotenv writes straight into os.environ
        os.environ.pop("INKWELL_CONTENT_DIR", None)

    assert config.content_dir == Path("/from/dotenv")


def test_missing_config_file_uses_defaults(tmp_path):
    config = load_config(tmp_path / "missing.toml")
    assert config.content_dir == Path("content")


def test_substitute_env_vars_keeps_unknown_placeholders():
    data = {"a": ["${INKWELL_TEST_UNSET_VAR}", "${INKWELL_TEST_UNSET_VAR:-fallback}"]}
    assert _substitute_env_vars(data) == {"a": ["${INKWELL_TEST_UNSET_VAR}", "fallback"]}


def test_invalid_values_fail():
    with pytest.raises(ValidationError):
        IngestionConfig(max_workers=0)
    with pytest.raises(ValidationError, match="extension"):
        IngestionConfig(extensions=["  "])


def test_default_config_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "inkwell.toml").write_text("", encoding="utf-8")
    assert get_default_config_path() == tmp_path / "inkwell.toml"
