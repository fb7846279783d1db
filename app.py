#!/usr/bin/env python3
"""
CDK Python Application for OverWatch SES

This application declares the monitoring of an Amazon SES sending account:
- CloudWatch log group for SES delivery problem events (kept one year)
- EventBridge rule routing SES bounce, complaint, delay, reject and
  rendering failure events into the log group
- CloudWatch alarms on bounce rate, complaint rate and sending quota usage
- SES configuration set and event destination publishing to EventBridge
- Optional SES email identity, alarm notification topic and dashboard

Configuration comes from CDK context (see cdk.json).
"""

import logging
import os
from typing import Optional

import aws_cdk as cdk
from aws_cdk import Aspects, Environment, Tags
from cdk_nag import AwsSolutionsChecks, NagSuppressions

from overwatch_ses.config import OverWatchConfig
from overwatch_ses.overwatch_ses_stack import OverWatchSesStack

logger = logging.getLogger(__name__)


def get_environment() -> Optional[Environment]:
    """
    Get the CDK environment configuration from environment variables.

    Returns:
        Environment configuration with account and region, or None for environment-agnostic deployment
    """
    account = os.environ.get("CDK_DEFAULT_ACCOUNT")
    region = os.environ.get("CDK_DEFAULT_REGION")

    if account and region:
        return Environment(account=account, region=region)
    return None


def create_app(app: Optional[cdk.App] = None) -> cdk.App:
    """
    Build the CDK application with the OverWatch SES stack.

    Args:
        app: Existing application to populate, a new one is created if omitted

    Returns:
        The populated CDK application (not yet synthesized)

    Raises:
        ValueError: If the CDK context holds an invalid configuration
    """
    app = app or cdk.App()

    config = OverWatchConfig.from_context(app.node)

    env = get_environment()
    if env is None:
        logger.info("No CDK_DEFAULT_ACCOUNT/CDK_DEFAULT_REGION set; synthesizing environment-agnostic stack")
    else:
        logger.info("Targeting account %s in %s", env.account, env.region)

    stack = OverWatchSesStack(
        app,
        config.stack_name,
        config=config,
        env=env,
        description="SES reputation monitoring with CloudWatch alarms and EventBridge event logging",
    )

    # Apply AWS Solutions best practices checks
    Aspects.of(app).add(AwsSolutionsChecks(verbose=True))

    # The log group target's resource policy is installed by a CDK-managed
    # custom resource whose role and runtime we do not control.
    NagSuppressions.add_stack_suppressions(
        stack,
        suppressions=[
            {
                "id": "AwsSolutions-IAM4",
                "reason": "CDK custom resource provider uses the AWS managed Lambda basic execution policy",
            },
            {
                "id": "AwsSolutions-IAM5",
                "reason": "Log group resource policy management requires wildcard resources",
            },
            {
                "id": "AwsSolutions-L1",
                "reason": "Custom resource provider runtime is managed by the CDK",
            },
            {
                "id": "AwsSolutions-SNS2",
                "reason": "Alarm notifications carry no sensitive data; SSL is enforced on the topic",
            },
        ],
    )

    # Add tags for resource management and cost allocation
    Tags.of(stack).add("Project", "OverWatchSES")
    Tags.of(stack).add("Environment", config.environment)
    Tags.of(stack).add("ManagedBy", "CDK")

    return app


def main() -> None:
    """
    Main entry point for the CDK application.

    Creates the CDK app from context and synthesizes it.
    """
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    app.synth()


if __name__ == "__main__":
    main()
