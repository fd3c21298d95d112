from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class PlannerSettings:
    """Deployment target the plan is computed for.

    `provider_domain` is the suffix of the transfer endpoint hostname, e.g.
    "amazonaws.com" for "s-1234.server.transfer.eu-west-1.amazonaws.com".
    """

    region_name: str
    account_id: str
    stack_name: str = "sftp-server"
    provider_domain: str = "amazonaws.com"
    _DEFAULT_TRANSFER_PORT: ClassVar[int] = 22
    transfer_port: int = _DEFAULT_TRANSFER_PORT

    @property
    def bucket_name(self) -> str:
        return f"{self.stack_name}-sftp-{self.account_id}-{self.region_name}"

    @property
    def archive_bucket_name(self) -> str:
        return f"{self.stack_name}-archive-{self.account_id}-{self.region_name}"

    @staticmethod
    def from_env() -> "PlannerSettings":
        region_name = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
        if not region_name:
            raise ValueError("Missing required environment variable: AWS_REGION (or AWS_DEFAULT_REGION)")

        account_id = os.getenv("AWS_ACCOUNT_ID") or os.getenv("CDK_DEFAULT_ACCOUNT")
        if not account_id:
            raise ValueError("Missing required environment variable: AWS_ACCOUNT_ID (or CDK_DEFAULT_ACCOUNT)")

        port_raw = os.getenv("SFTP_TRANSFER_PORT")
        transfer_port = PlannerSettings._DEFAULT_TRANSFER_PORT
        if port_raw:
            try:
                transfer_port = int(port_raw)
            except ValueError as exc:
                raise ValueError("Invalid SFTP_TRANSFER_PORT; must be an integer") from exc

        return PlannerSettings(
            region_name=region_name,
            account_id=account_id,
            stack_name=os.getenv("SFTP_STACK_NAME", "sftp-server"),
            provider_domain=os.getenv("SFTP_PROVIDER_DOMAIN", "amazonaws.com"),
            transfer_port=transfer_port,
        )
