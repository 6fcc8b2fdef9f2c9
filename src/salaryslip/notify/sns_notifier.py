"""SNS notifier implementing INotifier."""

from __future__ import annotations

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from salaryslip.core.exceptions import NotificationError

# SNS rejects subjects longer than 100 characters.
MAX_SUBJECT_LENGTH = 100


class SNSNotifier:
    """Publishes failure notifications to an SNS topic."""

    def __init__(self, topic_arn: str, region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._topic_arn = topic_arn
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("sns", **kwargs)

    def notify(self, subject: str, message: str) -> None:
        try:
            self._client.publish(
                TopicArn=self._topic_arn,
                Subject=subject[:MAX_SUBJECT_LENGTH],
                Message=message,
            )
        except (BotoCoreError, ClientError) as exc:
            raise NotificationError(f"SNS publish to {self._topic_arn!r} failed: {exc}") from exc
