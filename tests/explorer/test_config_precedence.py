from __future__ import annotations

from pathlib import Path

import pytest

from covex.core.errors import ConfigError
from covex.explorer.config import ExplorerSettings

_ENV_KEYS = [
    "COVEX_DEFAULT_SMOOTHING",
    "COVEX_CASES_ALIGN_THRESHOLD",
    "COVEX_CASES_PER_MILLION_ALIGN_THRESHOLD",
    "COVEX_DEATHS_ALIGN_THRESHOLD",
    "COVEX_DEATHS_PER_MILLION_ALIGN_THRESHOLD",
    "COVEX_ALIGN_MIN_DAYS",
    "COVEX_PALETTE",
    "COVEX_LOG_LEVEL",
    "COVEX_LOG_FORMAT",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write_covex_toml(tmp: Path, content: str) -> Path:
    p = tmp / "covex.toml"
    p.write_text(content)
    return p


def test_defaults(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    s = ExplorerSettings.load()
    assert s == ExplorerSettings()
    assert s.align_threshold("cases", per_million=False) == 100
    assert s.align_threshold("cases", per_million=True) == 1
    assert s.align_threshold("deaths", per_million=False) == 5
    assert s.align_threshold("tests", per_million=True) == 0.1


def test_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    _write_covex_toml(
        tmp_path,
        """
        [explorer]
        default_smoothing = 7
        cases_align_threshold = 50
        palette = ["red", "green"]
        log_format = "json"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("COVEX_CASES_ALIGN_THRESHOLD", "250")
    monkeypatch.setenv("COVEX_PALETTE", "teal, navy")

    s = ExplorerSettings.load()

    assert s.cases_align_threshold == 250.0  # env override
    assert s.palette == ("teal", "navy")  # env override
    assert s.default_smoothing == 7  # from TOML
    assert s.log_format == "json"  # from TOML
    assert s.deaths_align_threshold == 5.0  # default


def test_toml_top_level_keys(tmp_path: Path, monkeypatch) -> None:
    _write_covex_toml(tmp_path, "align_min_days = 3\nlog_level = \"debug\"\n")
    monkeypatch.chdir(tmp_path)
    s = ExplorerSettings.from_toml()
    assert s.align_min_days == 3
    assert s.log_level == "DEBUG"


def test_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "[project]\nname = \"x\"\n\n[tool.covex]\ndeaths_per_million_align_threshold = 0.5\n"
    )
    monkeypatch.chdir(tmp_path)
    assert ExplorerSettings.load().deaths_per_million_align_threshold == 0.5


def test_explicit_path(tmp_path: Path) -> None:
    p = tmp_path / "elsewhere.toml"
    p.write_text("[explorer]\ncases_per_million_align_threshold = 2.5\n")
    assert ExplorerSettings.from_toml(p).cases_per_million_align_threshold == 2.5


def test_invalid_values_raise(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("COVEX_ALIGN_MIN_DAYS", "soon")
    with pytest.raises(ConfigError):
        ExplorerSettings.load()
    monkeypatch.delenv("COVEX_ALIGN_MIN_DAYS")
    monkeypatch.setenv("COVEX_LOG_FORMAT", "xml")
    with pytest.raises(ConfigError):
        ExplorerSettings.load()
    with pytest.raises(ConfigError):
        ExplorerSettings(default_smoothing=0)
    with pytest.raises(ConfigError):
        ExplorerSettings(palette=())


def test_invalid_toml_raises(tmp_path: Path) -> None:
    p = _write_covex_toml(tmp_path, "[explorer\n")
    with pytest.raises(ConfigError):
        ExplorerSettings.from_toml(p)
