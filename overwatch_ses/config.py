"""
Configuration for the OverWatch SES stack.

Values are read from CDK context (``cdk.json`` or ``cdk synth -c key=value``)
with environment-variable fallbacks for the addresses that usually differ per
account. Context passed on the command line always arrives as a string, so
numeric and boolean fields are coerced here rather than in the stack.
"""

import logging
import math
import os
import re
from dataclasses import dataclass, fields
from typing import Any, Optional, Tuple

from aws_cdk import aws_logs as logs
from constructs import Node

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DOMAIN_PATTERN = re.compile(
    r"^(?=.{1,253}$)([A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+[A-Za-z]{2,63}$"
)
CONFIGURATION_SET_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
STACK_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")

DEFAULT_SES_EVENT_DETAIL_TYPES = (
    "Email Bounced",
    "Email Complaint Received",
    "Email Delivery Delayed",
    "Email Rejected",
    "Email Rendering Failed",
)

# Fallbacks consulted when the matching context key is absent
ENVIRONMENT_FALLBACKS = {
    "sender_identity": "SES_SENDER_IDENTITY",
    "notification_email": "NOTIFICATION_EMAIL",
}


TRUE_WORDS = ("1", "true", "yes", "on")
FALSE_WORDS = ("0", "false", "no", "off")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    word = str(value).strip().lower()
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False
    raise ValueError(f"Expected a boolean, got {value!r}")


@dataclass(frozen=True)
class OverWatchConfig:
    """Tunable values for the SES monitoring stack."""

    stack_name: str = "OverWatchSES"
    log_group_name: str = "/aws/overwatch/ses-logs"
    log_retention: str = "ONE_YEAR"
    ses_event_detail_types: Tuple[str, ...] = DEFAULT_SES_EVENT_DETAIL_TYPES
    metric_period_minutes: int = 5
    evaluation_periods: int = 1
    bounce_rate_threshold: float = 4.0
    complaint_rate_threshold: float = 0.09
    sending_quota_threshold: float = 0.8
    alarm_name_prefix: Optional[str] = None
    configuration_set_name: str = "overwatch-ses"
    sender_identity: Optional[str] = None
    notification_email: Optional[str] = None
    enable_dashboard: bool = True
    environment: str = "dev"

    @classmethod
    def from_context(cls, node: Node) -> "OverWatchConfig":
        """
        Build a configuration from CDK context values.

        Args:
            node: Construct node to read context from (usually ``app.node``)

        Returns:
            Validated configuration

        Raises:
            ValueError: If any value is out of range or malformed
        """
        values = {}
        for field in fields(cls):
            value = node.try_get_context(field.name)
            if value is None and field.name in ENVIRONMENT_FALLBACKS:
                value = os.environ.get(ENVIRONMENT_FALLBACKS[field.name]) or None
            if value is None:
                continue
            values[field.name] = cls._coerce(field.name, value)

        config = cls(**values)
        config.validate()
        logger.debug("Resolved OverWatch configuration: %s", config)
        return config

    @staticmethod
    def _coerce(name: str, value: Any) -> Any:
        try:
            if name in ("metric_period_minutes", "evaluation_periods"):
                return int(value)
            if name.endswith("_threshold"):
                return float(value)
            if name == "enable_dashboard":
                return _to_bool(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid value for {name}: {value!r}") from e
        if name == "ses_event_detail_types":
            if isinstance(value, str):
                value = [part.strip() for part in value.split(",") if part.strip()]
            return tuple(value)
        if name in ("sender_identity", "notification_email", "alarm_name_prefix"):
            return str(value).strip() or None
        return str(value)

    def validate(self) -> None:
        """Raise ``ValueError`` if the configuration cannot be synthesized."""
        if not STACK_NAME_PATTERN.match(self.stack_name):
            raise ValueError(
                f"stack_name must start with a letter and contain only letters, digits and hyphens, got {self.stack_name!r}"
            )

        if self.log_retention not in logs.RetentionDays.__members__:
            raise ValueError(
                f"log_retention must be a RetentionDays member name, got {self.log_retention!r}"
            )

        for name in ("bounce_rate_threshold", "complaint_rate_threshold", "sending_quota_threshold"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must not be negative")

        if self.metric_period_minutes < 1:
            raise ValueError("metric_period_minutes must be at least 1")
        if self.evaluation_periods < 1:
            raise ValueError("evaluation_periods must be at least 1")

        if not self.log_group_name:
            raise ValueError("log_group_name must not be empty")
        if not self.ses_event_detail_types:
            raise ValueError("ses_event_detail_types must list at least one detail type")

        if not CONFIGURATION_SET_NAME_PATTERN.match(self.configuration_set_name):
            raise ValueError(
                "configuration_set_name must be 1-64 letters, digits, hyphens or underscores"
            )

        if self.notification_email and not EMAIL_PATTERN.match(self.notification_email):
            raise ValueError(f"notification_email is not a valid address: {self.notification_email}")

        if self.sender_identity and not (
            EMAIL_PATTERN.match(self.sender_identity) or DOMAIN_PATTERN.match(self.sender_identity)
        ):
            raise ValueError(
                f"sender_identity must be an email address or a domain: {self.sender_identity}"
            )

    @property
    def retention_days(self) -> logs.RetentionDays:
        return logs.RetentionDays[self.log_retention]

    @property
    def identity_is_domain(self) -> bool:
        return bool(self.sender_identity) and "@" not in self.sender_identity
