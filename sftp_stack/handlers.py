"""Lambda entrypoints for the runtime handlers the plan wires in."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from sftp_stack.models.events import HostKeyEvent
from sftp_stack.services.dependencies import get_archive_service, get_host_key_service

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def host_key_handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    try:
        response = asyncio.run(get_host_key_service().handle_event(HostKeyEvent.model_validate(event)))
    except Exception:
        logger.exception("Error caught")
        raise
    return response.model_dump(by_alias=True)


def archive_handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    try:
        archived = asyncio.run(get_archive_service().handle_event(event))
    except Exception:
        logger.exception("Error caught")
        raise
    return {"archived": [obj.model_dump() for obj in archived]}
