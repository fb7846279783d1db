"""
OverWatch SES Stack

This CDK stack watches the health of an Amazon SES sending account:
- CloudWatch log group collecting SES delivery problem events
- EventBridge rule forwarding bounce, complaint, delay, reject and rendering
  failure events into the log group
- CloudWatch alarms on bounce rate, complaint rate and sending quota usage
- SES configuration set publishing its events to the default event bus
- Optional SES email identity bound to the configuration set
- Optional SNS topic for alarm notifications and a CloudWatch dashboard
"""

import logging
from typing import Any, Dict, List, Optional

from aws_cdk import (
    CfnOutput,
    Duration,
    Stack,
    aws_cloudwatch as cloudwatch,
    aws_cloudwatch_actions as cw_actions,
    aws_events as events,
    aws_events_targets as targets,
    aws_logs as logs,
    aws_ses as ses,
    aws_sns as sns,
    aws_sns_subscriptions as subscriptions,
)
from constructs import Construct

from overwatch_ses.config import OverWatchConfig
from overwatch_ses.metrics import reputation_alarm_specs

logger = logging.getLogger(__name__)

# SES sending events published to EventBridge; each one arrives on the bus
# under one of the detail types the event rule matches.
PUBLISHED_SENDING_EVENTS = [
    ses.EmailSendingEvent.BOUNCE,
    ses.EmailSendingEvent.COMPLAINT,
    ses.EmailSendingEvent.DELIVERY_DELAY,
    ses.EmailSendingEvent.REJECT,
    ses.EmailSendingEvent.RENDERING_FAILURE,
]


class OverWatchSesStack(Stack):
    """
    CDK Stack for SES reputation and delivery monitoring.

    All resources are declared from a single ``OverWatchConfig``; optional
    resources (identity, notification topic, dashboard) are only declared
    when the configuration asks for them.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: Optional[OverWatchConfig] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the OverWatch SES Stack.

        Args:
            scope: The parent construct
            construct_id: Unique identifier for this stack
            config: Monitoring configuration, defaults to ``OverWatchConfig()``
            **kwargs: Additional stack properties
        """
        super().__init__(scope, construct_id, **kwargs)

        self.config = config or OverWatchConfig()
        self.config.validate()

        # Log group and the rule feeding it
        self.log_group = self._create_log_group()
        self.event_rule = self._create_event_rule()

        # Alarm notifications are optional
        self.alarm_topic = self._create_alarm_topic()
        self.alarms = self._create_alarms()

        # SES sending side
        self.configuration_set = self._create_configuration_set()
        self.event_destination = self._create_event_destination()
        self.email_identity = self._create_email_identity()

        self.dashboard = self._create_dashboard() if self.config.enable_dashboard else None

        self._create_outputs()

    @property
    def metric_period(self) -> Duration:
        return Duration.minutes(self.config.metric_period_minutes)

    def _create_log_group(self) -> logs.LogGroup:
        """
        Create the CloudWatch log group holding SES events.

        Returns:
            CloudWatch LogGroup construct
        """
        return logs.LogGroup(
            self,
            "OverWatchSESLogGroup",
            log_group_name=self.config.log_group_name,
            retention=self.config.retention_days,
        )

    def _create_event_rule(self) -> events.Rule:
        """
        Create the EventBridge rule matching SES delivery problem events.

        The log group target installs a resource policy on the log group
        through a custom resource, which brings its own IAM role.

        Returns:
            EventBridge Rule construct
        """
        rule = events.Rule(
            self,
            "SESEventRule",
            description="Forward SES delivery problem events to the OverWatch log group",
            event_pattern=events.EventPattern(
                source=["aws.ses"],
                detail_type=list(self.config.ses_event_detail_types),
            ),
        )
        rule.add_target(
            targets.CloudWatchLogGroup(self.log_group, install_latest_aws_sdk=False)
        )
        return rule

    def _create_alarm_topic(self) -> Optional[sns.Topic]:
        if not self.config.notification_email:
            logger.warning("No notification_email configured; alarms will have no actions")
            return None

        topic = sns.Topic(
            self,
            "AlarmNotificationTopic",
            display_name="OverWatch SES Alarms",
            enforce_ssl=True,
        )
        topic.add_subscription(
            subscriptions.EmailSubscription(self.config.notification_email)
        )
        return topic

    def _create_alarms(self) -> Dict[str, cloudwatch.Alarm]:
        """
        Create CloudWatch alarms for SES reputation and sending quota.

        Every alarm fires at or above its threshold after
        ``evaluation_periods`` periods and treats missing data as not
        breaching.

        Returns:
            Alarms keyed by construct id
        """
        alarms = {}
        for spec in reputation_alarm_specs(self.config):
            # Physical names are left to CloudFormation unless a prefix is configured
            alarm_name = None
            if self.config.alarm_name_prefix:
                alarm_name = f"{self.config.alarm_name_prefix}-{spec.name_suffix}"

            alarm = cloudwatch.Alarm(
                self,
                spec.construct_id,
                alarm_name=alarm_name,
                alarm_description=spec.description,
                metric=spec.metric_factory(self.metric_period),
                threshold=spec.threshold,
                evaluation_periods=self.config.evaluation_periods,
                comparison_operator=cloudwatch.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
                treat_missing_data=cloudwatch.TreatMissingData.NOT_BREACHING,
            )

            if self.alarm_topic is not None:
                alarm.add_alarm_action(cw_actions.SnsAction(self.alarm_topic))
                alarm.add_ok_action(cw_actions.SnsAction(self.alarm_topic))

            alarms[spec.construct_id] = alarm
        return alarms

    def _create_configuration_set(self) -> ses.ConfigurationSet:
        return ses.ConfigurationSet(
            self,
            "OverWatchConfigurationSet",
            configuration_set_name=self.config.configuration_set_name,
            reputation_metrics=True,
            sending_enabled=True,
        )

    def _create_event_destination(self) -> ses.ConfigurationSetEventDestination:
        """
        Publish configuration set events to the account's default event bus.

        SES only delivers to the default bus, which is also where the event
        rule listens.

        Returns:
            SES configuration set event destination
        """
        default_bus = events.EventBus.from_event_bus_name(self, "DefaultEventBus", "default")
        return ses.ConfigurationSetEventDestination(
            self,
            "EventBridgeDestination",
            configuration_set=self.configuration_set,
            configuration_set_event_destination_name="overwatch-eventbridge",
            destination=ses.EventDestination.event_bus(default_bus),
            events=PUBLISHED_SENDING_EVENTS,
            enabled=True,
        )

    def _create_email_identity(self) -> Optional[ses.EmailIdentity]:
        identity_value = self.config.sender_identity
        if not identity_value:
            logger.warning("No sender_identity configured; skipping SES email identity")
            return None

        if self.config.identity_is_domain:
            identity = ses.Identity.domain(identity_value)
        else:
            identity = ses.Identity.email(identity_value)

        return ses.EmailIdentity(
            self,
            "SenderIdentity",
            identity=identity,
            configuration_set=self.configuration_set,
            feedback_forwarding=True,
        )

    def _create_dashboard(self) -> cloudwatch.Dashboard:
        """
        Create a CloudWatch dashboard with one graph per watched metric and
        the current state of every alarm.

        Returns:
            CloudWatch Dashboard construct
        """
        dashboard = cloudwatch.Dashboard(
            self,
            "OverWatchSESDashboard",
            dashboard_name=f"{self.config.stack_name}-ses",
            default_interval=Duration.hours(3),
        )

        graphs: List[cloudwatch.IWidget] = []
        alarm_widgets: List[cloudwatch.IWidget] = []
        for spec in reputation_alarm_specs(self.config):
            graphs.append(
                cloudwatch.GraphWidget(
                    title=spec.name_suffix,
                    left=[spec.metric_factory(self.metric_period)],
                    width=8,
                    height=6,
                )
            )
            alarm_widgets.append(
                cloudwatch.AlarmWidget(
                    title=f"{spec.name_suffix} alarm",
                    alarm=self.alarms[spec.construct_id],
                    width=8,
                    height=6,
                )
            )

        dashboard.add_widgets(*graphs)
        dashboard.add_widgets(*alarm_widgets)
        return dashboard

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs for important resources."""

        CfnOutput(
            self,
            "LogGroupName",
            value=self.log_group.log_group_name,
            description="CloudWatch log group receiving SES events",
        )

        CfnOutput(
            self,
            "EventRuleName",
            value=self.event_rule.rule_name,
            description="EventBridge rule matching SES delivery problem events",
        )

        CfnOutput(
            self,
            "ConfigurationSetName",
            value=self.configuration_set.configuration_set_name,
            description="SES configuration set publishing events to EventBridge",
        )

        for spec in reputation_alarm_specs(self.config):
            CfnOutput(
                self,
                f"{spec.name_suffix}AlarmName",
                value=self.alarms[spec.construct_id].alarm_name,
                description=f"Name of the {spec.name_suffix} alarm",
            )

        if self.alarm_topic is not None:
            CfnOutput(
                self,
                "AlarmTopicArn",
                value=self.alarm_topic.topic_arn,
                description="SNS topic receiving alarm notifications",
            )

        if self.email_identity is not None:
            CfnOutput(
                self,
                "EmailIdentityName",
                value=self.email_identity.email_identity_name,
                description="SES email identity bound to the configuration set",
            )
