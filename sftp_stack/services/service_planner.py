from __future__ import annotations

import logging
from typing import Optional

from sftp_stack.models.plan import (
    AddressAllocation,
    AliasRecordPlan,
    EndpointDetails,
    HostKeyRotationPlan,
    HostnameResolution,
    IngressRule,
    LoggingRolePlan,
    PolicyStatement,
    ResolvedNetwork,
    SecurityGroupPlan,
    ServerPlan,
    ServiceIdentity,
    ServicePlan,
    resource_ref,
)
from sftp_stack.models.stack_config import CustomHostKey
from sftp_stack.services.config import PlannerSettings
from sftp_stack.services.errors import ConfigError

logger = logging.getLogger(__name__)

TRANSFER_PRINCIPAL = "transfer.amazonaws.com"
SERVER_LOGICAL_ID = "sftpServer"


def endpoint_name(server_id: str, settings: PlannerSettings) -> str:
    return f"{server_id}.server.transfer.{settings.region_name}.{settings.provider_domain}"


def server_arn(server_id: str, settings: PlannerSettings) -> str:
    return f"arn:aws:transfer:{settings.region_name}:{settings.account_id}:server/{server_id}"


def plan_logging_role() -> LoggingRolePlan:
    return LoggingRolePlan(
        role_arn=resource_ref("loggingRole", "Arn"),
        assumed_by=TRANSFER_PRINCIPAL,
        description="Logging Role for the SFTP Server",
        statements=[
            PolicyStatement(
                sid="Logs",
                action=[
                    "logs:CreateLogStream",
                    "logs:DescribeLogStreams",
                    "logs:CreateLogGroup",
                    "logs:PutLogEvents",
                ],
                resource=["*"],
            )
        ],
    )


def plan_service(
    *,
    network: ResolvedNetwork,
    ingress_rules: list[IngressRule],
    allocations: list[AddressAllocation],
    hostname: Optional[HostnameResolution],
    settings: PlannerSettings,
    server_id: Optional[str] = None,
) -> ServicePlan:
    """Compose the transfer server, its logging role and network binding.

    `server_id` is only known once the server exists; pass it when re-planning an
    existing deployment, otherwise a reference token is used.
    """

    logging_role = plan_logging_role()
    security_group = SecurityGroupPlan(
        group_id=resource_ref("sg", "GroupId"),
        vpc_id=network.vpc_id,
        description="SFTP Server Sg",
        ingress_rules=ingress_rules,
    )
    certificate = hostname.certificate if hostname is not None else None

    server = ServerPlan(
        logical_id=SERVER_LOGICAL_ID,
        logging_role_arn=logging_role.role_arn,
        endpoint_details=EndpointDetails(
            vpc_id=network.vpc_id,
            subnet_ids=list(network.subnet_ids),
            address_allocation_ids=[a.allocation_id for a in allocations],
            security_group_ids=[security_group.group_id],
        ),
        certificate_arn=certificate.certificate_arn if certificate is not None else None,
    )

    assigned_id = server_id or resource_ref(SERVER_LOGICAL_ID, "ServerId")
    domain_name = endpoint_name(assigned_id, settings)
    outputs = {"domainName": domain_name}

    alias_record: Optional[AliasRecordPlan] = None
    custom_hostname: Optional[str] = None
    if hostname is not None:
        custom_hostname = hostname.fqdn
        alias_record = AliasRecordPlan(
            record_name=custom_hostname,
            target=domain_name,
            hosted_zone_id=hostname.zone.hosted_zone_id,
        )
        outputs["customHostname"] = custom_hostname

    identity = ServiceIdentity(server_id=assigned_id, endpoint_name=domain_name, custom_hostname=custom_hostname)
    logger.info("Service planned: endpoint=%s public_name=%s", identity.endpoint_name, identity.public_name)

    return ServicePlan(
        logging_role=logging_role,
        security_group=security_group,
        address_allocations=allocations,
        certificate=certificate,
        server=server,
        identity=identity,
        alias_record=alias_record,
        outputs=outputs,
    )


def plan_host_key_rotation(
    custom_host_key: CustomHostKey,
    identity: ServiceIdentity,
    settings: PlannerSettings,
) -> Optional[HostKeyRotationPlan]:
    """Version-tagged host key import, applied after the server exists.

    The handler is a no-op for an unchanged (server, secret, version) triple and
    ignores Delete: host keys are not revoked on teardown.
    """

    if not custom_host_key.use_custom_key:
        return None

    secret_arn = custom_host_key.host_key_secret_arn
    if not secret_arn:
        raise ConfigError("missing host key secret reference")

    plan = HostKeyRotationPlan(
        server_id=identity.server_id,
        host_key_secret_arn=secret_arn,
        host_key_version=custom_host_key.host_key_version,
        permissions=[
            PolicyStatement(
                action=["secretsmanager:GetSecretValue", "secretsmanager:DescribeSecret"],
                resource=[secret_arn],
            ),
            PolicyStatement(action=["transfer:UpdateServer"], resource=[server_arn(identity.server_id, settings)]),
        ],
    )
    logger.info("Host key rotation planned: version=%s", plan.host_key_version or "<unversioned>")
    return plan
