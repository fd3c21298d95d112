from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ArchiveConfig:
    """Runtime configuration for the archive-on-upload handler."""

    archive_bucket_name: str
    region_name: Optional[str] = None

    @staticmethod
    def from_env() -> "ArchiveConfig":
        archive_bucket_name = os.getenv("ARCHIVE_BUCKET_NAME")
        if not archive_bucket_name:
            raise ValueError("Missing required environment variable: ARCHIVE_BUCKET_NAME")

        region_name = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
        return ArchiveConfig(archive_bucket_name=archive_bucket_name, region_name=region_name)
