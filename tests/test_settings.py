from __future__ import annotations

import sys
from pathlib import Path

import pytest

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from brandeck.dispatch import DispatchPolicy  # noqa: E402
from brandeck.errors import ConfigError  # noqa: E402
from brandeck.settings import Settings, load_settings  # noqa: E402


def test_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    settings = load_settings(environ={})
    assert settings.dispatch_policy is DispatchPolicy.STRICT
    assert settings.port == 3001
    assert settings.max_age_days == 7
    assert settings.base_url == "/api/presentations"
    assert settings.output_dir == (tmp_path / "generated-presentations").resolve()


def test_yaml_then_environment_then_overrides(tmp_path: Path) -> None:
    config = tmp_path / "brandeck.yaml"
    config.write_text(
        "output_dir: decks\ndispatch_policy: lenient\nport: 8080\nlog_level: debug\nbase_url: /decks/\n",
        encoding="utf-8",
    )

    settings = load_settings(config, environ={"BRANDECK_PORT": "9090", "BRANDECK_MAX_AGE_DAYS": "3"}, host="0.0.0.0")

    assert settings.dispatch_policy is DispatchPolicy.LENIENT
    assert settings.port == 9090
    assert settings.max_age_days == 3
    assert settings.host == "0.0.0.0"
    assert settings.log_level == "DEBUG"
    assert settings.base_url == "/decks"
    assert settings.output_dir.name == "decks"


def test_none_overrides_are_ignored(tmp_path: Path) -> None:
    config = tmp_path / "brandeck.yaml"
    config.write_text("port: 8080\n", encoding="utf-8")
    assert load_settings(config, environ={}, port=None).port == 8080


@pytest.mark.parametrize(
    "content",
    ["port: 70000\n", "dispatch_policy: sometimes\n", "log_level: loud\n", "unknown_key: 1\n", "- a list\n"],
)
def test_invalid_settings_raise_config_error(tmp_path: Path, content: str) -> None:
    config = tmp_path / "brandeck.yaml"
    config.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(config, environ={})


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "missing.yaml", environ={})


def test_settings_are_frozen(tmp_path: Path) -> None:
    settings = Settings(output_dir=tmp_path)
    with pytest.raises(Exception):
        settings.port = 1  # type: ignore[misc]


def test_default_output_dir_is_absolute(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    settings = Settings()
    assert settings.output_dir.is_absolute()
    assert settings.output_dir == tmp_path.resolve() / "generated-presentations"


def test_cors_origins_from_environment(tmp_path: Path) -> None:
    settings = load_settings(
        environ={"BRANDECK_CORS_ORIGINS": "https://a.example, https://b.example"},
        output_dir=tmp_path,
    )
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert Settings(output_dir=tmp_path).cors_origins == ["*"]
