"""
OverWatch SES

CDK constructs for monitoring an Amazon SES sending account with CloudWatch
alarms, EventBridge event logging and an SES configuration set.
"""

from .config import OverWatchConfig
from .overwatch_ses_stack import OverWatchSesStack

__all__ = [
    "OverWatchConfig",
    "OverWatchSesStack",
]
