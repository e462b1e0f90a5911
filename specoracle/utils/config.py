"""
Configuration management for spec-oracle.
Supports YAML configuration files.
"""

import yaml
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
from pathlib import Path

from ..oracle.checks import DefaultContractChecker
from ..oracle.outcome import BehaviorType
from ..specification.evaluator import ConditionEvaluator
from ..specification.spec_language import resolve_exception_type


@dataclass
class OracleConfig:
    """Configuration for the default contract and call classification."""
    exception_behavior: str = "error"  # expected | error | invalid
    flaky_exceptions: List[str] = field(default_factory=lambda: ["TimeoutError", "ConnectionError"])
    skip_invalid: bool = False


@dataclass
class EvaluationConfig:
    """Configuration for condition evaluation."""
    timeout_ms: int = 5000


@dataclass
class Config:
    """Main configuration class for spec-oracle."""

    oracle: OracleConfig = field(default_factory=OracleConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def default_checker(self) -> DefaultContractChecker:
        """Build a fresh default contract checker for one call."""
        return DefaultContractChecker(
            exception_behavior=BehaviorType.from_string(self.oracle.exception_behavior),
            flaky_exceptions=[resolve_exception_type(n) for n in self.oracle.flaky_exceptions],
        )

    def evaluator(self) -> ConditionEvaluator:
        """Build the condition evaluator."""
        return ConditionEvaluator(timeout_ms=self.evaluation.timeout_ms)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "oracle": {
                "exception_behavior": self.oracle.exception_behavior,
                "flaky_exceptions": self.oracle.flaky_exceptions,
                "skip_invalid": self.oracle.skip_invalid,
            },
            "evaluation": {
                "timeout_ms": self.evaluation.timeout_ms,
            },
            "log_level": self.log_level,
            "log_file": self.log_file,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary."""
        config = cls()

        config.log_level = data.get("log_level", config.log_level)
        config.log_file = data.get("log_file", config.log_file)

        if "oracle" in data:
            oracle_data = data["oracle"]
            config.oracle = OracleConfig(
                exception_behavior=oracle_data.get("exception_behavior", "error"),
                flaky_exceptions=oracle_data.get(
                    "flaky_exceptions", OracleConfig().flaky_exceptions
                ),
                skip_invalid=oracle_data.get("skip_invalid", False),
            )

        if "evaluation" in data:
            eval_data = data["evaluation"]
            config.evaluation = EvaluationConfig(
                timeout_ms=eval_data.get("timeout_ms", 5000),
            )

        return config


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    return Config.from_dict(data or {})


def save_config(config: Config, config_path: str) -> None:
    """Save configuration to YAML file."""
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
