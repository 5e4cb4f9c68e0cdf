"""
Mediation policy
Loads the configurable mediation rules (prompt style, fallback texts, code
sizes, report limits) from YAML configuration.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_POLICY_PATH = Path(__file__).parent / "mediation_policy.yaml"


class MediationPolicy:
    """
    Read-only view over mediation_policy.yaml.
    Services ask the policy for tunables instead of hardcoding them.
    """

    def __init__(self, policy_path: Optional[str] = None):
        """
        Initialize the policy from a YAML file.

        Args:
            policy_path: Path to mediation_policy.yaml. Defaults to
                MEDIATION_POLICY_PATH or the bundled file.
        """
        if policy_path is None:
            policy_path = os.getenv("MEDIATION_POLICY_PATH", str(DEFAULT_POLICY_PATH))

        self.policy_path = policy_path
        self.config: Dict[str, Any] = {}
        self.version: str = "1.0.0"
        self.last_loaded: Optional[datetime] = None

        self._load()

    def _load(self) -> None:
        try:
            with open(self.policy_path, "r", encoding="utf-8") as f:
                self.config = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            raise FileNotFoundError(f"Mediation policy file not found: {e}")
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing mediation policy YAML: {e}")

        self.last_loaded = datetime.now()
        self.version = str(self.config.get("version", "1.0.0"))

    def reload(self) -> None:
        """Reload the policy from disk."""
        self._load()

    def _section(self, name: str) -> Dict[str, Any]:
        return self.config.get(name) or {}

    # Mediator prompt settings

    @property
    def jurisdiction(self) -> str:
        return self._section("mediator").get("jurisdiction", "Canada")

    @property
    def language(self) -> str:
        return self._section("mediator").get("language", "English")

    @property
    def mediation_style(self) -> str:
        return self._section("mediator").get("style", "facilitative")

    @property
    def requires_confidentiality(self) -> bool:
        return bool(self._section("mediator").get("requires_confidentiality", True))

    @property
    def post_welcome_message(self) -> bool:
        return bool(self._section("mediator").get("post_welcome_message", True))

    def style_description(self, style: Optional[str] = None) -> str:
        descriptions = self._section("mediator").get("style_descriptions") or {}
        return descriptions.get(style or self.mediation_style, "")

    # Fallback texts used when no AI provider answers

    @property
    def fallback_reply(self) -> str:
        return self._section("fallbacks").get(
            "reply",
            "I'm processing your message. Let's continue our discussion to find a resolution.",
        )

    def fallback_welcome(self, dispute_type: str) -> str:
        template = self._section("fallbacks").get("welcome", "Hello, I'm your AI Mediator.")
        return template.format(dispute_type=dispute_type).strip()

    def fallback_summary(self, dispute_type: str) -> str:
        template = self._section("fallbacks").get("summary", "A mediation session was conducted.")
        return template.format(dispute_type=dispute_type).strip()

    @property
    def fallback_recommendations(self) -> List[str]:
        return list(self._section("fallbacks").get("recommendations") or [])

    # Code generation

    @property
    def invitation_code_bytes(self) -> int:
        return int(self._section("codes").get("invitation_code_bytes", 16))

    @property
    def session_code_bytes(self) -> int:
        return int(self._section("codes").get("session_code_bytes", 9))

    @property
    def verification_code_digits(self) -> int:
        return int(self._section("codes").get("verification_code_digits", 6))

    @property
    def max_generation_attempts(self) -> int:
        return int(self._section("codes").get("max_generation_attempts", 5))

    # Settlements

    @property
    def default_expiry_days(self) -> int:
        return int(self._section("settlement").get("default_expiry_days", 14))

    @property
    def max_expiry_days(self) -> int:
        return int(self._section("settlement").get("max_expiry_days", 30))

    # Reports

    @property
    def report_top_users(self) -> int:
        return int(self._section("reports").get("top_users", 5))

    @property
    def report_recent_activities(self) -> int:
        return int(self._section("reports").get("recent_activities", 10))
