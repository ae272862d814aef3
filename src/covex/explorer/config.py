"""
Configuration for the covex explorer.

Defines ExplorerSettings, a frozen dataclass carrying the defaults the explorer
uses when QueryParams leave an option unset: smoothing window, alignment
thresholds and minimum days, the series palette, and logging setup.

Source of truth
- covex.core.constants.DEFAULT_PALETTE for the palette.
- Alignment thresholds are absolute counts (cases 100, deaths 5) or per-million
  values (cases 1, deaths 0.1) depending on whether the query is per capita.

Precedence
- environment (COVEX_*) > TOML (covex.toml [explorer], or pyproject.toml
  [tool.covex]) > defaults.

Import DAG discipline
- Depends only on stdlib and covex.core.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

from covex.core.constants import DEFAULT_PALETTE
from covex.core.errors import ConfigError
from covex.core.grammar import MetricKind, metric_kind_from_value

LogFormat = Literal["console", "json"]

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_LOG_FORMATS = {"console", "json"}
_FLOAT_KEYS = (
    "cases_align_threshold",
    "cases_per_million_align_threshold",
    "deaths_align_threshold",
    "deaths_per_million_align_threshold",
)
_INT_KEYS = ("default_smoothing", "align_min_days")


@dataclass(frozen=True)
class ExplorerSettings:
    """
    Runtime settings for covex.explorer.

    Attributes:
        default_smoothing (int): Rolling window used when a query leaves smoothing at 1
            (1 = unsmoothed).
        cases_align_threshold (float): Cumulative cases marking day 0 for absolute alignment.
        cases_per_million_align_threshold (float): Cases per million marking day 0.
        deaths_align_threshold (float): Cumulative deaths marking day 0 for absolute alignment.
        deaths_per_million_align_threshold (float): Deaths per million marking day 0.
        align_min_days (int): Minimum samples after day 0 for an entity to stay aligned.
        palette (tuple[str, ...]): Series color identifiers in tie-break order.
        log_level (str): Stdlib logging level name.
        log_format (Literal["console", "json"]): structlog renderer.

    Examples:
        >>> from covex.explorer.config import ExplorerSettings
        >>> ExplorerSettings().align_threshold("deaths", per_million=True)
        0.1
    """

    default_smoothing: int = 1
    cases_align_threshold: float = 100.0
    cases_per_million_align_threshold: float = 1.0
    deaths_align_threshold: float = 5.0
    deaths_per_million_align_threshold: float = 0.1
    align_min_days: int = 0
    palette: tuple[str, ...] = DEFAULT_PALETTE
    log_level: str = "INFO"
    log_format: LogFormat = "console"

    def __post_init__(self) -> None:
        if self.default_smoothing < 1:
            raise ConfigError(f"default_smoothing must be >= 1 (got {self.default_smoothing!r})")
        if self.align_min_days < 0:
            raise ConfigError(f"align_min_days must be >= 0 (got {self.align_min_days!r})")
        if not self.palette:
            raise ConfigError("palette must contain at least one color")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError(f"unknown log_level {self.log_level!r}")
        if self.log_format not in _LOG_FORMATS:
            raise ConfigError(f"log_format must be 'console' or 'json' (got {self.log_format!r})")

    def align_threshold(self, metric: MetricKind | str, per_million: bool) -> float:
        """Default day-0 threshold for the alignment source of a metric (tests align on deaths)."""
        cases = metric_kind_from_value(metric) is MetricKind.CASES
        if per_million:
            return self.cases_per_million_align_threshold if cases else self.deaths_per_million_align_threshold
        return self.cases_align_threshold if cases else self.deaths_align_threshold

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: ExplorerSettings, cfg: dict[str, Any] | None) -> ExplorerSettings:
        """Apply a loose config mapping onto ExplorerSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        changes: dict[str, Any] = {}
        for key in _INT_KEYS:
            if key in cfg:
                changes[key] = _coerce(key, cfg[key], int)
        for key in _FLOAT_KEYS:
            if key in cfg:
                changes[key] = _coerce(key, cfg[key], float)

        if "palette" in cfg:
            pal = cfg["palette"]
            if isinstance(pal, str):
                pal = [p for p in (c.strip() for c in pal.split(",")) if p]
            if not isinstance(pal, (list, tuple)):
                raise ConfigError(f"palette must be a list or comma-separated string (got {pal!r})")
            changes["palette"] = tuple(str(p) for p in pal)

        if "log_level" in cfg and isinstance(cfg["log_level"], str):
            changes["log_level"] = cfg["log_level"].strip().upper()
        if "log_format" in cfg and isinstance(cfg["log_format"], str):
            changes["log_format"] = cfg["log_format"].strip().lower()

        return replace(base, **changes) if changes else base

    @classmethod
    def from_env(cls, base: ExplorerSettings | None = None, prefix: str = "COVEX_") -> ExplorerSettings:
        """
        Build ExplorerSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - COVEX_DEFAULT_SMOOTHING
            - COVEX_CASES_ALIGN_THRESHOLD, COVEX_CASES_PER_MILLION_ALIGN_THRESHOLD
            - COVEX_DEATHS_ALIGN_THRESHOLD, COVEX_DEATHS_PER_MILLION_ALIGN_THRESHOLD
            - COVEX_ALIGN_MIN_DAYS
            - COVEX_PALETTE (comma-separated)
            - COVEX_LOG_LEVEL
            - COVEX_LOG_FORMAT ("console" | "json")
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in (*_INT_KEYS, *_FLOAT_KEYS, "palette", "log_level", "log_format"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> ExplorerSettings:
        """
        Build ExplorerSettings from a TOML file.

        Search order when `path` is None:
            1) ./covex.toml (with either an [explorer] table or top-level keys)
            2) ./pyproject.toml under [tool.covex]

        Returns defaults if no file is present.

        Raises:
            ConfigError: If a file exists but is not valid TOML.
        """
        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "covex.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"invalid TOML in {p}: {exc}") from exc
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("covex") if isinstance(tool, dict) else None
            elif isinstance(data.get("explorer"), dict):
                cfg = data["explorer"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(cls(), cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> ExplorerSettings:
        """
        Load ExplorerSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (covex.toml, pyproject.toml).
        """
        return cls.from_env(base=cls.from_toml(path))


def _coerce(key: str, value: Any, kind: type) -> Any:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number (got {value!r})")
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be {kind.__name__} (got {value!r})") from exc
