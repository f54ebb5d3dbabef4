from pathlib import Path
from typing import Dict, Any, Optional
import os
import yaml
import structlog

logger = structlog.get_logger()

DEFAULT_RULES_PATH = Path(__file__).parent / "business_rules.yaml"


class BusinessRulesConfig:
    """
    Scoring and recommendation policy loaded once from YAML.

    BUSINESS_RULES_PATH points at an alternative file. Missing keys fall back
    to the defaults held by the code that reads them.
    """
    _instance = None
    _config: Dict[str, Any] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(BusinessRulesConfig, cls).__new__(cls)
            cls._instance.reload()
        return cls._instance

    def reload(self, path: Optional[Path] = None) -> None:
        """Re-read the rules file, keeping an empty config if it cannot be parsed."""
        config_path = Path(path or os.getenv("BUSINESS_RULES_PATH", DEFAULT_RULES_PATH))

        if not config_path.exists():
            logger.warning(f"Business rules not found at {config_path}, using built-in defaults")
            self._config = {}
            return

        try:
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load business rules from {config_path}: {e}")
            self._config = {}
            return

        if not isinstance(loaded, dict):
            logger.error(f"Business rules in {config_path} must be a mapping, got {type(loaded).__name__}")
            loaded = {}
        self._config = loaded
        logger.info(f"Loaded business rules from {config_path}")

    def section(self, name: str) -> Dict[str, Any]:
        value = self._config.get(name, {})
        return value if isinstance(value, dict) else {}

    @property
    def urgency_rules(self) -> Dict[str, Any]:
        return self.section("urgency")

    @property
    def recommendation_rules(self) -> Dict[str, Any]:
        return self.section("recommendations")


# Global instance
business_rules = BusinessRulesConfig()
