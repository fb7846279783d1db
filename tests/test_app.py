"""
Unit tests for the CDK application entry point.
"""

import pytest
import aws_cdk as cdk
from aws_cdk import assertions

from app import create_app, get_environment


@pytest.fixture(autouse=True)
def clear_environment(monkeypatch):
    for name in ("CDK_DEFAULT_ACCOUNT", "CDK_DEFAULT_REGION", "SES_SENDER_IDENTITY", "NOTIFICATION_EMAIL"):
        monkeypatch.delenv(name, raising=False)


class TestGetEnvironment:
    """Test class for environment resolution"""

    def test_environment_agnostic(self):
        assert get_environment() is None

    def test_partial_environment_is_agnostic(self, monkeypatch):
        monkeypatch.setenv("CDK_DEFAULT_ACCOUNT", "123456789012")

        assert get_environment() is None

    def test_account_and_region(self, monkeypatch):
        monkeypatch.setenv("CDK_DEFAULT_ACCOUNT", "123456789012")
        monkeypatch.setenv("CDK_DEFAULT_REGION", "eu-west-1")

        env = get_environment()

        assert env.account == "123456789012"
        assert env.region == "eu-west-1"


class TestCreateApp:
    """Test class for application assembly"""

    def test_stack_created_with_default_name(self):
        app = create_app(cdk.App())

        stack = app.node.find_child("OverWatchSES")
        template = assertions.Template.from_stack(stack)
        template.resource_count_is("AWS::CloudWatch::Alarm", 3)

    def test_context_is_applied(self):
        app = create_app(cdk.App(context={
            "stack_name": "OverWatchSESProd",
            "notification_email": "ops@example.com",
            "environment": "prod",
        }))

        stack = app.node.find_child("OverWatchSESProd")
        template = assertions.Template.from_stack(stack)
        template.resource_count_is("AWS::SNS::Topic", 1)

        # Tags are applied by aspects during synthesis
        assert stack.tags.tag_values().get("Environment") == "prod"
        assert stack.tags.tag_values().get("Project") == "OverWatchSES"

    def test_invalid_context_raises(self):
        with pytest.raises(ValueError):
            create_app(cdk.App(context={"log_retention": "NEVER"}))

    def test_invalid_stack_name_raises_before_synthesis(self):
        with pytest.raises(ValueError, match="stack_name"):
            create_app(cdk.App(context={"stack_name": "my_stack"}))


class TestNagChecks:
    """Test class for AWS Solutions checks on the assembled stack"""

    def nag_errors(self, context):
        app = create_app(cdk.App(context=context))
        stack = app.node.find_child(context.get("stack_name", "OverWatchSES"))
        return assertions.Annotations.from_stack(stack).find_error(
            "*", assertions.Match.string_like_regexp("AwsSolutions-.*")
        )

    def test_default_stack_has_no_nag_errors(self):
        assert self.nag_errors({}) == []

    def test_fully_configured_stack_has_no_nag_errors(self):
        errors = self.nag_errors({
            "sender_identity": "mail.example.com",
            "notification_email": "ops@example.com",
            "alarm_name_prefix": "Prod-SES",
        })

        assert errors == []
