from __future__ import annotations

import ipaddress
import logging
from typing import Optional

from sftp_stack.models.stack_config import StackConfig
from sftp_stack.services.errors import ConfigError

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _normalize_cidrs(cidrs: list[str]) -> list[str]:
    seen: list[str] = []
    for raw in cidrs:
        cidr = raw.strip()
        try:
            ipaddress.IPv4Network(cidr, strict=False)
        except ValueError as exc:
            raise ConfigError(f"invalid allow-list entry: {raw!r} is not an IPv4 CIDR") from exc
        if cidr not in seen:
            seen.append(cidr)
    return seen


def validate_stack_config(config: StackConfig) -> StackConfig:
    """Normalize and gate the configuration before anything is planned.

    Returns a new StackConfig; the input is never modified.
    """

    hostname = config.custom_hostname
    host_key = config.custom_host_key

    zone_name = _clean(hostname.dns_attr.zone_name)
    hosted_zone_id = _clean(hostname.dns_attr.hosted_zone_id)
    sftp_hostname = _clean(hostname.sftp_hostname)

    if hostname.use_custom_hostname and not (zone_name and hosted_zone_id and sftp_hostname):
        raise ConfigError(
            "missing hostname attributes: zoneName, hostedZoneId, sftpHostname are required to use a custom hostname"
        )

    secret_arn = _clean(host_key.host_key_secret_arn)
    if host_key.use_custom_key and not secret_arn:
        raise ConfigError(
            "missing host key secret reference: hostKeySecretArn must be provided when importing a custom host key"
        )

    normalized = config.model_copy(
        update={
            "vpc_attr": config.vpc_attr.model_copy(update={"custom_vpc_id": _clean(config.vpc_attr.custom_vpc_id)}),
            "sftp_attr": config.sftp_attr.model_copy(
                update={"allow_cidrs": _normalize_cidrs(config.sftp_attr.allow_cidrs)}
            ),
            "custom_host_key": host_key.model_copy(
                update={
                    "host_key_secret_arn": secret_arn,
                    "host_key_version": _clean(host_key.host_key_version),
                }
            ),
            "custom_hostname": hostname.model_copy(
                update={
                    "dns_attr": hostname.dns_attr.model_copy(
                        update={"zone_name": zone_name, "hosted_zone_id": hosted_zone_id}
                    ),
                    "sftp_hostname": sftp_hostname,
                    "certificate_arn": _clean(hostname.certificate_arn),
                }
            ),
            "notification_emails": [e.strip() for e in config.notification_emails if e.strip()],
        }
    )

    logger.info(
        "Config validated: custom_hostname=%s, custom_host_key=%s, allow_cidrs=%d, archive=%s, users=%d",
        hostname.use_custom_hostname,
        host_key.use_custom_key,
        len(normalized.sftp_attr.allow_cidrs),
        normalized.sftp_attr.move_to_archive,
        len(normalized.users),
    )
    return normalized
