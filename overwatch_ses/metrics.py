"""
SES metrics and the alarms watching them.

Amazon SES publishes reputation and sending metrics to the ``AWS/SES``
namespace on its own; nothing here creates metric data. The factories only
describe which statistic of which metric an alarm or dashboard widget reads.
"""

from dataclasses import dataclass
from typing import Callable, List

from aws_cdk import Duration, aws_cloudwatch as cloudwatch

from overwatch_ses.config import OverWatchConfig

SES_NAMESPACE = "AWS/SES"


def bounce_rate_metric(period: Duration) -> cloudwatch.Metric:
    return cloudwatch.Metric(
        namespace=SES_NAMESPACE,
        metric_name="Reputation.BounceRate",
        statistic="Average",
        period=period,
        unit=cloudwatch.Unit.PERCENT,
    )


def complaint_rate_metric(period: Duration) -> cloudwatch.Metric:
    return cloudwatch.Metric(
        namespace=SES_NAMESPACE,
        metric_name="Reputation.ComplaintRate",
        statistic="Average",
        period=period,
        unit=cloudwatch.Unit.PERCENT,
    )


def sending_rate_metric(period: Duration) -> cloudwatch.Metric:
    return cloudwatch.Metric(
        namespace=SES_NAMESPACE,
        metric_name="MaxSendRate",
        statistic="Maximum",
        period=period,
        unit=cloudwatch.Unit.COUNT,
    )


@dataclass(frozen=True)
class ReputationAlarmSpec:
    """One SES alarm: what it watches and when it fires."""

    construct_id: str
    name_suffix: str
    metric_factory: Callable[[Duration], cloudwatch.Metric]
    threshold: float
    description: str


def reputation_alarm_specs(config: OverWatchConfig) -> List[ReputationAlarmSpec]:
    """
    Describe the bounce, complaint and sending-quota alarms, in that order.

    Args:
        config: Stack configuration carrying the thresholds

    Returns:
        Alarm specifications ready to be turned into ``cloudwatch.Alarm``
    """
    quota_percent = f"{config.sending_quota_threshold * 100:g}%"
    return [
        ReputationAlarmSpec(
            construct_id="SES - HighBounceRateAlarm",
            name_suffix="HighBounceRate",
            metric_factory=bounce_rate_metric,
            threshold=config.bounce_rate_threshold,
            description="Alarm when SES reputation bounce rate is too high",
        ),
        ReputationAlarmSpec(
            construct_id="SES - HighComplaintRateAlarm",
            name_suffix="HighComplaintRate",
            metric_factory=complaint_rate_metric,
            threshold=config.complaint_rate_threshold,
            description="Alarm when SES reputation complaint rate is too high",
        ),
        ReputationAlarmSpec(
            construct_id="SES - SendingQuotaUsageAlarm",
            name_suffix="SendingQuotaUsage",
            metric_factory=sending_rate_metric,
            threshold=config.sending_quota_threshold,
            description=f"Alarm when SES sending rate reaches {quota_percent} of the quota",
        ),
    ]
