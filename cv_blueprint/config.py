"""YAML config loading and validation."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class MergeSettings:
    similarity_threshold: float = 0.5  # token overlap of the smaller set
    baseline_confidence: float = 0.6  # single-source fact
    confidence_increment: float = 0.15  # share of the remaining gap to 1.0
    max_confidence: float = 0.99
    max_attempts: int = 3  # optimistic-concurrency attempts per merge


@dataclass
class AppConfig:
    merging: MergeSettings = field(default_factory=MergeSettings)
    database_url: str = "sqlite:///data/cv_blueprint.db"
    log_dir: str = "logs"
    log_level: str = "INFO"


def load_config(config_path: str = "config.yaml") -> AppConfig:
    """Load configuration from a YAML file; DATABASE_URL env var wins over the file."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Copy config.example.yaml to config.yaml and adjust your settings."
        )

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    config = AppConfig()

    merging_raw = raw.get("merging", {})
    config.merging = MergeSettings(
        similarity_threshold=merging_raw.get("similarity_threshold", 0.5),
        baseline_confidence=merging_raw.get("baseline_confidence", 0.6),
        confidence_increment=merging_raw.get("confidence_increment", 0.15),
        max_confidence=merging_raw.get("max_confidence", 0.99),
        max_attempts=merging_raw.get("max_attempts", 3),
    )

    config.database_url = os.environ.get(
        "DATABASE_URL", raw.get("database_url", "sqlite:///data/cv_blueprint.db")
    )
    config.log_dir = raw.get("log_dir", "logs")
    config.log_level = str(raw.get("log_level", "INFO")).upper()

    return config


def validate_config(config: AppConfig) -> list[str]:
    """Return list of validation warnings (empty = OK)."""
    warnings = []
    merging = config.merging

    if not 0.0 < merging.similarity_threshold <= 1.0:
        warnings.append("similarity_threshold should be in (0, 1] - fuzzy matching will misbehave")

    if not 0.0 < merging.baseline_confidence < 1.0:
        warnings.append("baseline_confidence should be strictly between 0 and 1")

    if not 0.0 <= merging.confidence_increment < 1.0:
        warnings.append("confidence_increment should be in [0, 1)")

    if not merging.baseline_confidence <= merging.max_confidence < 1.0:
        warnings.append("max_confidence should be below 1 and not below baseline_confidence")

    if merging.max_attempts < 1:
        warnings.append("max_attempts must be at least 1 - merges will never be attempted")

    if not config.database_url:
        warnings.append("No database_url configured")

    if not isinstance(logging.getLevelName(config.log_level.upper()), int):
        warnings.append(f"Unknown log_level {config.log_level!r} - INFO will be used")

    return warnings
