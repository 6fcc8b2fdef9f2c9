"""Failure notification backends."""

from __future__ import annotations

from salaryslip.core.config import NotifyConfig
from salaryslip.core.protocols import INotifier
from salaryslip.notify.sns_notifier import SNSNotifier


class NullNotifier:
    """INotifier used when no notification target is configured."""

    def notify(self, subject: str, message: str) -> None:
        return None


def create_notifier(config: NotifyConfig | None = None) -> INotifier:
    """SNS notifier when a topic is configured, otherwise a no-op."""
    if config is None:
        config = NotifyConfig()
    if not config.topic_arn:
        return NullNotifier()
    return SNSNotifier(
        topic_arn=config.topic_arn,
        region=config.region,
        endpoint_url=config.endpoint_url,
    )


__all__ = ["NullNotifier", "SNSNotifier", "create_notifier"]
