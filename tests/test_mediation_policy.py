"""
Tests for MediationPolicy
"""

import pytest

from odr_api.config.policy import MediationPolicy


class TestMediationPolicy:
    """Test cases for MediationPolicy"""

    @pytest.fixture
    def policy(self):
        """Create a MediationPolicy from the bundled YAML"""
        return MediationPolicy()

    def test_load_policy(self, policy):
        """Test that the policy loads correctly"""
        assert policy.config
        assert policy.last_loaded is not None
        assert policy.version == "1.0.0"

    def test_mediator_settings(self, policy):
        assert policy.jurisdiction == "Canada"
        assert policy.mediation_style == "facilitative"
        assert "communicate effectively" in policy.style_description()
        assert policy.style_description("unknown") == ""

    def test_fallback_texts(self, policy):
        """Fallback templates are filled with the dispute type"""
        assert "employment" in policy.fallback_welcome("employment")
        assert "employment" in policy.fallback_summary("employment")
        assert policy.fallback_reply.startswith("I'm processing your message")
        assert len(policy.fallback_recommendations) == 3

    def test_limits(self, policy):
        assert policy.report_top_users == 5
        assert policy.report_recent_activities == 10
        assert policy.verification_code_digits == 6
        assert policy.default_expiry_days <= policy.max_expiry_days

    def test_custom_policy_file(self, tmp_path):
        """Missing sections fall back to defaults"""
        path = tmp_path / "policy.yaml"
        path.write_text("version: '2.0'\nreports:\n  top_users: 3\n")

        policy = MediationPolicy(str(path))

        assert policy.version == "2.0"
        assert policy.report_top_users == 3
        assert policy.report_recent_activities == 10
        assert policy.post_welcome_message is True

    def test_reload(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("mediator:\n  jurisdiction: Ontario\n")
        policy = MediationPolicy(str(path))

        path.write_text("mediator:\n  jurisdiction: Quebec\n")
        policy.reload()

        assert policy.jurisdiction == "Quebec"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MediationPolicy(str(tmp_path / "missing.yaml"))
