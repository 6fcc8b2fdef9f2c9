"""Tests for SNSNotifier using moto, and the notifier factory."""

from __future__ import annotations

import boto3
import pytest
from moto import mock_aws

from salaryslip.core.config import NotifyConfig
from salaryslip.core.exceptions import NotificationError
from salaryslip.notify import NullNotifier, create_notifier
from salaryslip.notify.sns_notifier import SNSNotifier

REGION = "us-east-1"


@pytest.fixture
def aws_env(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)


@pytest.fixture
def topic_and_queue(aws_env):
    with mock_aws():
        sns = boto3.client("sns", region_name=REGION)
        sqs = boto3.client("sqs", region_name=REGION)
        topic_arn = sns.create_topic(Name="salaryslip-failures")["TopicArn"]
        queue_url = sqs.create_queue(QueueName="failures")["QueueUrl"]
        queue_arn = sqs.get_queue_attributes(QueueUrl=queue_url, AttributeNames=["QueueArn"])["Attributes"]["QueueArn"]
        sns.subscribe(TopicArn=topic_arn, Protocol="sqs", Endpoint=queue_arn,
                      Attributes={"RawMessageDelivery": "true"})
        yield topic_arn, sqs, queue_url


class TestNotify:
    def test_publishes_message(self, topic_and_queue):
        topic_arn, sqs, queue_url = topic_and_queue
        SNSNotifier(topic_arn, region=REGION).notify("Run failed", "Failed to create output directory")

        messages = sqs.receive_message(QueueUrl=queue_url).get("Messages", [])
        assert [m["Body"] for m in messages] == ["Failed to create output directory"]

    def test_long_subject_is_truncated(self, topic_and_queue):
        topic_arn, _, _ = topic_and_queue
        SNSNotifier(topic_arn, region=REGION).notify("x" * 250, "body")

    def test_unknown_topic_raises_notification_error(self, aws_env):
        with mock_aws():
            notifier = SNSNotifier(f"arn:aws:sns:{REGION}:123456789012:missing", region=REGION)
            with pytest.raises(NotificationError):
                notifier.notify("subject", "body")


class TestFactory:
    def test_no_topic_is_null_notifier(self):
        notifier = create_notifier(NotifyConfig(topic_arn=""))
        assert isinstance(notifier, NullNotifier)
        notifier.notify("ignored", "ignored")

    def test_topic_selects_sns(self, aws_env):
        with mock_aws():
            notifier = create_notifier(NotifyConfig(topic_arn=f"arn:aws:sns:{REGION}:123456789012:t"))
        assert isinstance(notifier, SNSNotifier)
