"""
Configuration for the closure engine.

Values come from an optional YAML file and are then overridden by
environment variables (a .env file in the working directory is honoured).

    rules_path: path/to/closure_rules.dat
    report: true
    none_link_window: 1
    seed: 42
    log_level: DEBUG
"""
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from temporal_closure.logger import get_logger
from temporal_closure.rule_table import RuleTable

logger = get_logger(__name__)

ENV_RULES = "TCLOSURE_RULES"
ENV_REPORT = "TCLOSURE_REPORT"
ENV_NONE_WINDOW = "TCLOSURE_NONE_WINDOW"
ENV_SEED = "TCLOSURE_SEED"
ENV_LOG_LEVEL = "LOG_LEVEL"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass
class ClosureConfig:
    """Settings shared by closure, consistency checks and NONE link generation."""
    rules_path: Optional[Path] = None
    report: bool = False
    none_link_window: int = 1
    seed: Optional[int] = None
    log_level: str = "INFO"

    def __post_init__(self):
        if self.rules_path is not None:
            self.rules_path = Path(self.rules_path)
        if self.none_link_window < 0:
            raise ValueError(f"none_link_window must be >= 0, got {self.none_link_window}")

    def load_rules(self) -> RuleTable:
        """Rule table from rules_path, or the packaged rules when unset."""
        if self.rules_path is None:
            return RuleTable.load_default()
        return RuleTable.from_path(self.rules_path)


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{name}: expected a boolean, got {value!r}")


def _parse_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name}: expected an integer, got {value!r}") from e


def _read_yaml(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")

    known = {f.name for f in fields(ClosureConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"{path}: unknown configuration keys {unknown}")
    return data


def load_config(path: Optional[Path] = None) -> ClosureConfig:
    """Build a ClosureConfig from an optional YAML file plus the environment."""
    load_dotenv(find_dotenv(usecwd=True))
    values: Dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        logger.info(f"Reading configuration from {path}")
        values.update(_read_yaml(path))

    if os.getenv(ENV_RULES):
        values["rules_path"] = os.environ[ENV_RULES]
    if os.getenv(ENV_REPORT) is not None:
        values["report"] = os.environ[ENV_REPORT]
    if os.getenv(ENV_NONE_WINDOW):
        values["none_link_window"] = os.environ[ENV_NONE_WINDOW]
    if os.getenv(ENV_SEED):
        values["seed"] = os.environ[ENV_SEED]
    if os.getenv(ENV_LOG_LEVEL):
        values["log_level"] = os.environ[ENV_LOG_LEVEL]

    if "report" in values:
        values["report"] = _parse_bool(values["report"], "report")
    if "none_link_window" in values:
        values["none_link_window"] = _parse_int(values["none_link_window"], "none_link_window")
    if values.get("seed") is not None:
        values["seed"] = _parse_int(values["seed"], "seed")
    if "log_level" in values:
        values["log_level"] = str(values["log_level"]).upper()

    return ClosureConfig(**values)
