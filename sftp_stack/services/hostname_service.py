from __future__ import annotations

import logging
from typing import Any, Optional, cast

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from sftp_stack.models.plan import CertificatePlan, HostedZoneRef, HostnameResolution, resource_ref
from sftp_stack.models.stack_config import CustomHostname
from sftp_stack.services.errors import ConfigError, ExternalLookupError

logger = logging.getLogger(__name__)


class HostnameService:
    """Resolves the hosted zone and certificate for a custom SFTP hostname."""

    def __init__(self, *, session: Any = None) -> None:
        self._session = session if session is not None else aioboto3.Session()

    def _client(self) -> Any:
        # Route 53 is a global service.
        return self._session.client("route53")

    async def resolve(self, custom_hostname: CustomHostname) -> Optional[HostnameResolution]:
        if not custom_hostname.use_custom_hostname:
            return None

        dns_attr = custom_hostname.dns_attr
        if not (dns_attr.zone_name and dns_attr.hosted_zone_id and custom_hostname.sftp_hostname):
            raise ConfigError(
                "missing hostname attributes: zoneName, hostedZoneId, sftpHostname are required to use a custom hostname"
            )

        zone = await self._lookup_zone(zone_name=dns_attr.zone_name, hosted_zone_id=dns_attr.hosted_zone_id)
        certificate = select_certificate(custom_hostname.certificate_arn, zone)

        logger.info(
            "Hostname resolved: zone=%s (%s) certificate=%s",
            zone.zone_name,
            zone.hosted_zone_id,
            "requested" if certificate.requested else "imported",
        )
        return HostnameResolution(zone=zone, certificate=certificate, hostname_label=custom_hostname.sftp_hostname)

    async def _lookup_zone(self, *, zone_name: str, hosted_zone_id: str) -> HostedZoneRef:
        try:
            async with cast(Any, self._client()) as route53:
                resp = await route53.get_hosted_zone(Id=hosted_zone_id)
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Hosted zone lookup failed")
            raise ExternalLookupError(f"Failed to look up hosted zone {hosted_zone_id}") from exc

        found = ((resp.get("HostedZone") or {}).get("Name") or "").rstrip(".")
        expected = zone_name.rstrip(".")
        if found.lower() != expected.lower():
            raise ExternalLookupError(
                f"Hosted zone {hosted_zone_id} is {found or '<unnamed>'!r}, expected {expected!r}"
            )

        return HostedZoneRef(zone_name=expected, hosted_zone_id=hosted_zone_id)


def select_certificate(certificate_arn: Optional[str], zone: HostedZoneRef) -> CertificatePlan:
    """Bind a caller-owned certificate as-is, or request a DNS-validated wildcard one."""

    if certificate_arn:
        return CertificatePlan(certificate_arn=certificate_arn, requested=False)

    return CertificatePlan(
        certificate_arn=resource_ref("cert", "CertificateArn"),
        requested=True,
        domain_name=f"*.{zone.zone_name}",
        validation_method="DNS",
        validation_zone_id=zone.hosted_zone_id,
    )
