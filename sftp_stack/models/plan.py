from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel, to_pascal


def resource_ref(logical_id: str, attribute: str) -> str:
    """Reference token for a value only known once the plan is applied."""

    return f"${{{logical_id}.{attribute}}}"


def bucket_arn(bucket_name: str) -> str:
    return f"arn:aws:s3:::{bucket_name}"


class PlanModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


# -----------------
# IAM documents
# -----------------


class PolicyStatement(BaseModel):
    """One IAM statement, serialized with IAM's PascalCase keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_pascal)

    sid: Optional[str] = None
    effect: str = "Allow"
    action: list[str] = Field(..., min_length=1)
    resource: list[str] = Field(..., min_length=1)
    condition: Optional[dict[str, dict[str, list[str]]]] = None


class PolicyDocument(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_pascal)

    version: str = "2012-10-17"
    statement: list[PolicyStatement] = Field(..., min_length=1)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# -----------------
# Network
# -----------------


class ResolvedNetwork(PlanModel):
    vpc_id: str
    cidr_block: str
    subnet_ids: list[str] = Field(..., min_length=1)


class IngressRule(PlanModel):
    cidr: str
    port: int
    description: str


class AddressAllocation(PlanModel):
    logical_id: str
    subnet_id: str
    allocation_id: str


# -----------------
# Hostname / certificate
# -----------------


class HostedZoneRef(PlanModel):
    zone_name: str
    hosted_zone_id: str


class CertificatePlan(PlanModel):
    logical_id: str = "cert"
    certificate_arn: str
    requested: bool
    domain_name: Optional[str] = None
    validation_method: Optional[str] = None
    validation_zone_id: Optional[str] = None


class HostnameResolution(PlanModel):
    zone: HostedZoneRef
    certificate: CertificatePlan
    hostname_label: str

    @property
    def fqdn(self) -> str:
        return f"{self.hostname_label}.{self.zone.zone_name}"


# -----------------
# Transfer service
# -----------------


class LoggingRolePlan(PlanModel):
    logical_id: str = "loggingRole"
    role_arn: str
    assumed_by: str
    description: str
    statements: list[PolicyStatement]


class SecurityGroupPlan(PlanModel):
    logical_id: str = "sg"
    group_id: str
    vpc_id: str
    description: str
    allow_all_outbound: bool = True
    ingress_rules: list[IngressRule]


class EndpointDetails(PlanModel):
    vpc_id: str
    subnet_ids: list[str]
    address_allocation_ids: list[str]
    security_group_ids: list[str]


class ServerPlan(PlanModel):
    logical_id: str = "sftpServer"
    domain: str = "S3"
    endpoint_type: str = "VPC"
    identity_provider_type: str = "SERVICE_MANAGED"
    protocols: list[str] = Field(default_factory=lambda: ["SFTP"])
    logging_role_arn: str
    endpoint_details: EndpointDetails
    certificate_arn: Optional[str] = None


class ServiceIdentity(PlanModel):
    server_id: str
    endpoint_name: str
    custom_hostname: Optional[str] = None

    @property
    def public_name(self) -> str:
        return self.custom_hostname or self.endpoint_name


class AliasRecordPlan(PlanModel):
    logical_id: str = "record"
    record_type: str = "CNAME"
    record_name: str
    target: str
    hosted_zone_id: str


class ServicePlan(PlanModel):
    logging_role: LoggingRolePlan
    security_group: SecurityGroupPlan
    address_allocations: list[AddressAllocation]
    certificate: Optional[CertificatePlan] = None
    server: ServerPlan
    identity: ServiceIdentity
    alias_record: Optional[AliasRecordPlan] = None
    outputs: dict[str, str]


class HostKeyRotationPlan(PlanModel):
    logical_id: str = "customHostKey"
    server_id: str
    host_key_secret_arn: str
    host_key_version: Optional[str] = None
    permissions: list[PolicyStatement]

    @property
    def idempotency_key(self) -> tuple[str, str, Optional[str]]:
        return (self.server_id, self.host_key_secret_arn, self.host_key_version)

    def resource_properties(self) -> dict[str, Any]:
        return {
            "serverId": self.server_id,
            "hostKeySecretArn": self.host_key_secret_arn,
            "hostKeyVersion": self.host_key_version or "",
        }


# -----------------
# Storage / access
# -----------------


class StorageIdentity(PlanModel):
    bucket_name: str
    bucket_arn: str
    archive_bucket_name: Optional[str] = None
    archive_bucket_arn: Optional[str] = None
    block_public_access: bool = True
    auto_delete_objects: bool = True

    @property
    def has_archive(self) -> bool:
        return self.archive_bucket_name is not None


class ScopedPolicy(PlanModel):
    user_name: str
    document: PolicyDocument


class TransferUserPlan(PlanModel):
    logical_id: str
    user_name: str
    server_id: str
    role_arn: str
    home_directory: str
    ssh_public_keys: list[str]
    policy: ScopedPolicy


class UserRolePlan(PlanModel):
    logical_id: str = "sftpUserRole"
    role_arn: str
    assumed_by: str
    statements: list[PolicyStatement]


class UserAccessPlan(PlanModel):
    role: UserRolePlan
    users: list[TransferUserPlan] = Field(default_factory=list)

    def policy_for(self, user_name: str) -> ScopedPolicy:
        for user in self.users:
            if user.user_name == user_name:
                return user.policy
        raise KeyError(user_name)


# -----------------
# Event pipeline
# -----------------


class TopicPlan(PlanModel):
    logical_id: str = "uploadTopic"
    topic_arn: str


class BucketNotificationPlan(PlanModel):
    bucket_name: str
    events: list[str]
    topic_arn: str


class SubscriptionPlan(PlanModel):
    protocol: str
    endpoint: str
    dynamic: bool = False


class ArchiveHandlerPlan(PlanModel):
    logical_id: str = "archiveFnc"
    function_arn: str
    handler: str
    environment: dict[str, str]
    permissions: list[PolicyStatement]


class NotificationFanout(PlanModel):
    topic: TopicPlan
    bucket_notification: BucketNotificationPlan
    subscriptions: list[SubscriptionPlan]
    archive_handler: Optional[ArchiveHandlerPlan] = None

    @property
    def dynamic_subscriptions(self) -> list[SubscriptionPlan]:
        return [s for s in self.subscriptions if s.dynamic]


# -----------------
# Whole plan
# -----------------


class StackPlan(PlanModel):
    stack_name: str
    region: str
    network: ResolvedNetwork
    ingress_rules: list[IngressRule]
    hostname: Optional[HostnameResolution] = None
    service: ServicePlan
    host_key_rotation: Optional[HostKeyRotationPlan] = None
    storage: StorageIdentity
    user_access: UserAccessPlan
    notifications: NotificationFanout

    @property
    def outputs(self) -> dict[str, str]:
        return self.service.outputs
