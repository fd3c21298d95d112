from __future__ import annotations

import logging

from sftp_stack.models.plan import StorageIdentity, bucket_arn
from sftp_stack.models.stack_config import SftpAttr
from sftp_stack.services.config import PlannerSettings

logger = logging.getLogger(__name__)


def plan_storage(sftp_attr: SftpAttr, settings: PlannerSettings) -> StorageIdentity:
    bucket_name = settings.bucket_name
    archive_name = settings.archive_bucket_name if sftp_attr.move_to_archive else None

    storage = StorageIdentity(
        bucket_name=bucket_name,
        bucket_arn=bucket_arn(bucket_name),
        archive_bucket_name=archive_name,
        archive_bucket_arn=bucket_arn(archive_name) if archive_name else None,
    )
    logger.info("Storage planned: bucket=%s archive=%s", storage.bucket_name, storage.archive_bucket_name)
    return storage
