from __future__ import annotations

import logging
from typing import Optional

from sftp_stack.models.plan import (
    ArchiveHandlerPlan,
    BucketNotificationPlan,
    NotificationFanout,
    PolicyStatement,
    StorageIdentity,
    SubscriptionPlan,
    TopicPlan,
    resource_ref,
)
from sftp_stack.models.stack_config import StackConfig

logger = logging.getLogger(__name__)

OBJECT_CREATED_EVENTS = ["s3:ObjectCreated:*"]
ARCHIVE_HANDLER_ENTRYPOINT = "sftp_stack.handlers.archive_handler"


def plan_archive_handler(storage: StorageIdentity) -> Optional[ArchiveHandlerPlan]:
    """Archive subscriber: read-only on the upload bucket, write-only on the archive bucket."""

    if not storage.has_archive:
        return None

    return ArchiveHandlerPlan(
        function_arn=resource_ref("archiveFnc", "Arn"),
        handler=ARCHIVE_HANDLER_ENTRYPOINT,
        environment={"ARCHIVE_BUCKET_NAME": str(storage.archive_bucket_name)},
        permissions=[
            PolicyStatement(sid="ReadUploads", action=["s3:GetObject"], resource=[f"{storage.bucket_arn}/*"]),
            PolicyStatement(
                sid="WriteArchive",
                action=["s3:PutObject"],
                resource=[f"{storage.archive_bucket_arn}/*"],
            ),
        ],
    )


def plan_event_pipeline(config: StackConfig, storage: StorageIdentity) -> NotificationFanout:
    topic = TopicPlan(topic_arn=resource_ref("uploadTopic", "TopicArn"))

    subscriptions = [SubscriptionPlan(protocol="email", endpoint=email) for email in config.notification_emails]

    archive_handler = plan_archive_handler(storage)
    if archive_handler is not None:
        subscriptions.append(SubscriptionPlan(protocol="lambda", endpoint=archive_handler.function_arn, dynamic=True))

    fanout = NotificationFanout(
        topic=topic,
        bucket_notification=BucketNotificationPlan(
            bucket_name=storage.bucket_name,
            events=list(OBJECT_CREATED_EVENTS),
            topic_arn=topic.topic_arn,
        ),
        subscriptions=subscriptions,
        archive_handler=archive_handler,
    )
    logger.info(
        "Event pipeline planned: email_subscribers=%d archive=%s",
        len(config.notification_emails),
        archive_handler is not None,
    )
    return fanout
