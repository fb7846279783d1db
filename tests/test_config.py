"""
Unit tests for OverWatchConfig context parsing and validation.
"""

import pytest
import aws_cdk as cdk
from aws_cdk import aws_logs as logs

from overwatch_ses.config import DEFAULT_SES_EVENT_DETAIL_TYPES, OverWatchConfig


@pytest.fixture(autouse=True)
def clear_environment(monkeypatch):
    monkeypatch.delenv("SES_SENDER_IDENTITY", raising=False)
    monkeypatch.delenv("NOTIFICATION_EMAIL", raising=False)


def config_from(context=None):
    app = cdk.App(context=context or {})
    return OverWatchConfig.from_context(app.node)


class TestFromContext:
    """Test class for reading configuration out of CDK context"""

    def test_defaults(self):
        config = config_from()

        assert config.stack_name == "OverWatchSES"
        assert config.log_group_name == "/aws/overwatch/ses-logs"
        assert config.retention_days == logs.RetentionDays.ONE_YEAR
        assert config.ses_event_detail_types == DEFAULT_SES_EVENT_DETAIL_TYPES
        assert config.bounce_rate_threshold == 4
        assert config.complaint_rate_threshold == 0.09
        assert config.sending_quota_threshold == 0.8
        assert config.sender_identity is None
        assert config.notification_email is None
        assert config.enable_dashboard is True

    def test_string_values_are_coerced(self):
        """Test that command line context strings become numbers and booleans"""
        config = config_from({
            "bounce_rate_threshold": "5.5",
            "evaluation_periods": "2",
            "metric_period_minutes": "10",
            "enable_dashboard": "false",
        })

        assert config.bounce_rate_threshold == 5.5
        assert config.evaluation_periods == 2
        assert config.metric_period_minutes == 10
        assert config.enable_dashboard is False

    def test_detail_types_from_comma_separated_string(self):
        config = config_from({"ses_event_detail_types": "Email Bounced, Email Rejected"})

        assert config.ses_event_detail_types == ("Email Bounced", "Email Rejected")

    def test_detail_types_from_list(self):
        config = config_from({"ses_event_detail_types": ["Email Bounced"]})

        assert config.ses_event_detail_types == ("Email Bounced",)

    def test_environment_fallbacks(self, monkeypatch):
        monkeypatch.setenv("SES_SENDER_IDENTITY", "example.com")
        monkeypatch.setenv("NOTIFICATION_EMAIL", "ops@example.com")

        config = config_from()

        assert config.sender_identity == "example.com"
        assert config.identity_is_domain is True
        assert config.notification_email == "ops@example.com"

    def test_context_wins_over_environment(self, monkeypatch):
        monkeypatch.setenv("NOTIFICATION_EMAIL", "env@example.com")

        config = config_from({"notification_email": "context@example.com"})

        assert config.notification_email == "context@example.com"

    def test_non_numeric_threshold_rejected(self):
        with pytest.raises(ValueError, match="bounce_rate_threshold"):
            config_from({"bounce_rate_threshold": "high"})

    def test_nan_threshold_rejected(self):
        with pytest.raises(ValueError, match="bounce_rate_threshold"):
            config_from({"bounce_rate_threshold": "nan"})

    def test_misspelled_boolean_rejected(self):
        with pytest.raises(ValueError, match="enable_dashboard"):
            config_from({"enable_dashboard": "ture"})

    def test_invalid_stack_name_rejected(self):
        with pytest.raises(ValueError, match="stack_name"):
            config_from({"stack_name": "my_stack"})

    def test_alarm_name_prefix(self):
        assert config_from().alarm_name_prefix is None
        assert config_from({"alarm_name_prefix": "Prod-SES"}).alarm_name_prefix == "Prod-SES"


class TestValidate:
    """Test class for configuration validation"""

    def test_default_config_is_valid(self):
        OverWatchConfig().validate()

    @pytest.mark.parametrize("overrides", [
        {"log_retention": "FOREVER_AND_EVER"},
        {"bounce_rate_threshold": -1},
        {"complaint_rate_threshold": -0.01},
        {"sending_quota_threshold": -0.8},
        {"evaluation_periods": 0},
        {"metric_period_minutes": 0},
        {"log_group_name": ""},
        {"ses_event_detail_types": ()},
        {"configuration_set_name": "has spaces"},
        {"configuration_set_name": "x" * 65},
        {"notification_email": "not-an-address"},
        {"sender_identity": "not a domain"},
        {"stack_name": "my_stack"},
        {"stack_name": "1stStack"},
        {"bounce_rate_threshold": float("nan")},
        {"complaint_rate_threshold": float("inf")},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            OverWatchConfig(**overrides).validate()

    def test_email_identity(self):
        config = OverWatchConfig(sender_identity="sender@example.com")

        config.validate()
        assert config.identity_is_domain is False

    def test_domain_identity(self):
        config = OverWatchConfig(sender_identity="mail.example.co.uk")

        config.validate()
        assert config.identity_is_domain is True

    def test_no_identity(self):
        assert OverWatchConfig().identity_is_domain is False
