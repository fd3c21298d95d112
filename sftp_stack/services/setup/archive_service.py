from __future__ import annotations

import json
import logging
from typing import Any, Iterator, Optional, cast
from urllib.parse import unquote_plus

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from sftp_stack.models.events import ArchivedObject
from sftp_stack.services.config import ArchiveConfig

logger = logging.getLogger(__name__)


class ArchiveError(RuntimeError):
    pass


class ArchiveService:
    """Copies objects announced on the upload topic into the archive bucket.

    Invoked by an SNS subscription; each SNS message carries an S3 event
    notification. Objects keep their key in the archive bucket.
    """

    def __init__(self, config: ArchiveConfig, *, session: Any = None) -> None:
        self._config = config
        self._session = session if session is not None else aioboto3.Session()

    def _client(self) -> Any:
        return self._session.client("s3", region_name=self._config.region_name)

    @staticmethod
    def _s3_records(event: dict[str, Any]) -> Iterator[dict[str, Any]]:
        for record in event.get("Records") or []:
            sns = record.get("Sns")
            if sns is None:
                # Direct S3 notification (no SNS envelope).
                if "s3" in record:
                    yield record
                continue

            try:
                message = json.loads(sns.get("Message") or "{}")
            except json.JSONDecodeError as exc:
                raise ArchiveError("SNS message is not a JSON S3 event notification") from exc

            if message.get("Event") == "s3:TestEvent":
                logger.info("Skipping S3 test event")
                continue
            yield from message.get("Records") or []

    async def handle_event(self, event: dict[str, Any]) -> list[ArchivedObject]:
        archived: list[ArchivedObject] = []
        records = list(self._s3_records(event))
        if not records:
            logger.info("Archive handler: no object records in event")
            return archived

        s3_client: Any = self._client()
        async with cast(Any, s3_client) as s3:
            for record in records:
                obj = await self._archive_one(s3, record)
                if obj is not None:
                    archived.append(obj)

        logger.info("Archive handler: archived=%d", len(archived))
        return archived

    async def _archive_one(self, s3: Any, record: dict[str, Any]) -> Optional[ArchivedObject]:
        s3_part = record.get("s3") or {}
        bucket = (s3_part.get("bucket") or {}).get("name")
        raw_key = (s3_part.get("object") or {}).get("key")
        if not bucket or not raw_key:
            logger.warning("Archive handler: skipping record without bucket/key")
            return None

        key = unquote_plus(raw_key)
        try:
            await s3.copy_object(
                Bucket=self._config.archive_bucket_name,
                Key=key,
                CopySource={"Bucket": bucket, "Key": key},
            )
        except (ClientError, BotoCoreError) as exc:
            logger.exception("S3 copy_object failed")
            raise ArchiveError(f"Failed to archive s3://{bucket}/{key}") from exc

        return ArchivedObject(
            source_bucket=bucket,
            key=key,
            archive_bucket=self._config.archive_bucket_name,
        )
