"""
Configuration and constants for the card vendor insights pipeline.

This module provides:
- Default thresholds for unmasking, review flagging and reporting
- Support for user-configurable settings via environment variables
- Loading custom vendor/processor rules from YAML files
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# =============================================================================
# Application Info
# =============================================================================

APP_NAME: str = "Card Vendor Insights"
APP_VERSION: str = "1.0.0"

# =============================================================================
# Unmasking Settings
# =============================================================================

# Minimum unmasking confidence for the aggregator to trust an extracted name
UNMASK_ACCEPT_CONFIDENCE: float = float(
    os.environ.get("UNMASK_ACCEPT_CONFIDENCE", "0.5")
)

# Processors with a base confidence below this always need manual review
REVIEW_CONFIDENCE_THRESHOLD: float = float(
    os.environ.get("REVIEW_CONFIDENCE_THRESHOLD", "0.8")
)

# Fixed confidences for the fallback paths
DIRECT_CONFIDENCE: float = 1.0
SUSPICIOUS_CONFIDENCE: float = 0.3
EMPTY_EXTRACTION_CONFIDENCE: float = 0.1
DEGENERATE_EXTRACTION_CONFIDENCE: float = 0.4

UNKNOWN_VENDOR: str = "Unknown Vendor"
DEFAULT_CATEGORY: str = "Other"

# =============================================================================
# Reporting Limits
# =============================================================================

MAX_SUGGESTIONS: int = 5
MAX_REVIEW_ITEMS: int = 50
MAX_PATTERN_EXAMPLES: int = 3
MAX_TOP_VENDORS: int = 20

# =============================================================================
# CSV Loader Settings
# =============================================================================

# Canonical column names expected from the ingestion side
REQUIRED_COLUMNS: List[str] = ["date", "description", "amount"]
OPTIONAL_COLUMNS: List[str] = [
    "extended_details",
    "statement_description",
    "category",
]

FILE_ENCODING: str = os.environ.get("TRANSACTION_FILE_ENCODING", "utf-8-sig")


# =============================================================================
# Flexible Configuration System
# =============================================================================

class Config:
    """
    Flexible configuration manager that supports:
    - Environment variables
    - Custom YAML configuration files
    - Runtime overrides
    """

    _instance: Optional["Config"] = None
    _custom_rules: Dict[str, Any] = {}
    _settings: Dict[str, Any] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load_defaults()
            cls._instance._load_custom_config()
        return cls._instance

    def _load_defaults(self) -> None:
        """Load default settings."""
        self._settings = {
            "unmask_accept_confidence": UNMASK_ACCEPT_CONFIDENCE,
            "review_confidence_threshold": REVIEW_CONFIDENCE_THRESHOLD,
            "max_review_items": int(os.environ.get("MAX_REVIEW_ITEMS", MAX_REVIEW_ITEMS)),
            "unused_subscription_days": int(os.environ.get("UNUSED_SUBSCRIPTION_DAYS", "60")),
            "forecast_days": int(os.environ.get("FORECAST_DAYS", "30")),
            "file_encoding": FILE_ENCODING,
        }
        self._custom_rules = {}

    def _load_custom_config(self) -> None:
        """Load custom configuration from YAML file if available."""
        config_paths = [
            Path.cwd() / "config.yaml",
            Path.cwd() / "config.yml",
            Path(__file__).parent / "config.yaml",
            Path.home() / ".vendorinsights" / "config.yaml",
        ]

        for config_path in config_paths:
            if config_path.exists():
                custom_config = _read_yaml(config_path)
                if custom_config is not None:
                    self._settings.update(custom_config)
                    logger.info("Loaded config from %s", config_path)
                    break

        self._load_custom_rules()

    def _load_custom_rules(self) -> None:
        """Load custom vendor and processor rules from YAML."""
        rules_paths = [
            Path.cwd() / "custom_rules.yaml",
            Path.cwd() / "custom_rules.yml",
            Path(__file__).parent / "custom_rules.yaml",
            Path.home() / ".vendorinsights" / "custom_rules.yaml",
        ]

        for rules_path in rules_paths:
            if rules_path.exists():
                rules = _read_yaml(rules_path)
                if rules is not None:
                    self._custom_rules = rules
                    logger.info("Loaded custom rules from %s", rules_path)
                    break

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self._settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value at runtime."""
        self._settings[key] = value

    @property
    def custom_rules(self) -> Dict[str, Any]:
        """Get custom vendor/processor rules."""
        return self._custom_rules

    @property
    def custom_vendors(self) -> Dict[str, str]:
        """Get extra canonical vendor mappings from custom rules."""
        return self._custom_rules.get("custom_vendors") or {}

    @property
    def subscription_keywords(self) -> List[str]:
        """Get extra subscription keywords from custom rules."""
        return self._custom_rules.get("subscription_keywords") or []

    def reload(self) -> None:
        """Reload configuration from files."""
        self._load_defaults()
        self._load_custom_config()


def _read_yaml(path: Path) -> Optional[Dict[str, Any]]:
    """Read a YAML mapping, returning None when the file cannot be used."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not load %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top level must be a mapping", path)
        return None
    return data


def load_rules_file(path: str) -> Dict[str, Any]:
    """Load a custom rules file directly, bypassing the singleton."""
    if not os.path.exists(path):
        logger.info("No custom rules file found at %s", path)
        return {}
    return _read_yaml(Path(path)) or {}


def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
