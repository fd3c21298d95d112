from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Optional, cast

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from sftp_stack.models.events import HostKeyEvent, HostKeyResponse

logger = logging.getLogger(__name__)

VALID_REQUEST_TYPES = ("Create", "Update", "Delete")


class HostKeyRotationError(RuntimeError):
    pass


class HostKeyRotationService:
    """Custom resource handler that imports a host key into a transfer server.

    Requests are keyed by (serverId, hostKeySecretArn, hostKeyVersion). An Update
    with an unchanged key triple is acknowledged without touching the server.
    Delete is acknowledged and ignored: host keys are not revoked on teardown.
    """

    def __init__(self, *, region_name: Optional[str] = None, session: Any = None) -> None:
        self._region_name = region_name
        self._session = session if session is not None else aioboto3.Session()

    def _client(self, service_name: str) -> Any:
        return self._session.client(service_name, region_name=self._region_name)

    async def handle_event(self, event: HostKeyEvent) -> HostKeyResponse:
        logger.info("Event: %s", event.model_dump_json(by_alias=True))

        if event.request_type not in VALID_REQUEST_TYPES:
            raise HostKeyRotationError("Invalid RequestType")

        if event.request_type == "Delete":
            logger.info("Delete request received - ignoring it")
            return HostKeyResponse(physical_resource_id=event.physical_resource_id)

        props = event.resource_properties
        if not props.server_id:
            raise HostKeyRotationError("Missing serverId")
        if not props.host_key_secret_arn:
            raise HostKeyRotationError("Missing hostKeySecretArn")

        if event.request_type == "Update" and event.old_resource_properties == props:
            logger.info(
                "Host key version %r already applied to server %s - nothing to do",
                props.host_key_version,
                props.server_id,
            )
            return HostKeyResponse(physical_resource_id=event.physical_resource_id)

        logger.info("Getting and converting the key...")
        key = await self._read_host_key(props.host_key_secret_arn)

        logger.info("Updating the server...")
        updated_id = await self._update_server(server_id=props.server_id, host_key=key)
        logger.info("Updated host key for server: %s to version: %s", updated_id, props.host_key_version)

        physical_id = event.request_id if event.request_type == "Create" else event.physical_resource_id
        return HostKeyResponse(physical_resource_id=physical_id)

    async def _read_host_key(self, secret_arn: str) -> str:
        try:
            async with cast(Any, self._client("secretsmanager")) as sm:
                resp = await sm.get_secret_value(SecretId=secret_arn)
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Secrets Manager get_secret_value failed")
            raise HostKeyRotationError(f"Failed to read host key secret: {secret_arn}") from exc

        secret_string = resp.get("SecretString")
        if not secret_string:
            raise HostKeyRotationError(f"Host key secret has no SecretString: {secret_arn}")

        try:
            return base64.b64decode(secret_string).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise HostKeyRotationError(f"Host key secret is not base64-encoded text: {secret_arn}") from exc

    async def _update_server(self, *, server_id: str, host_key: str) -> str:
        try:
            async with cast(Any, self._client("transfer")) as transfer:
                resp = await transfer.update_server(ServerId=server_id, HostKey=host_key)
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Transfer update_server failed")
            raise HostKeyRotationError(f"Failed to update host key for server: {server_id}") from exc

        return str(resp.get("ServerId") or server_id)
