from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Any, Optional

from botocore.exceptions import ClientError


def client_error(code: str, operation: str, message: str = "boom") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeClientContext:
    def __init__(self, client: Any) -> None:
        self._client = client

    async def __aenter__(self) -> Any:
        return self._client

    async def __aexit__(self, *exc_info: Any) -> bool:
        return False


class FakeSession:
    """Stands in for aioboto3.Session: `client(name)` yields the registered fake."""

    def __init__(self, **clients: Any) -> None:
        self.clients = clients
        self.opened: list[str] = []

    def client(self, service_name: str, **kwargs: Any) -> FakeClientContext:
        self.opened.append(service_name)
        return FakeClientContext(self.clients[service_name])


class FakeEc2:
    def __init__(
        self,
        *,
        vpcs: list[dict[str, Any]],
        subnets: list[dict[str, Any]],
        route_tables: list[dict[str, Any]],
        error: Optional[Exception] = None,
    ) -> None:
        self.vpcs = vpcs
        self.subnets = subnets
        self.route_tables = route_tables
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def describe_vpcs(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("describe_vpcs", kwargs))
        if self.error is not None:
            raise self.error
        if "VpcIds" in kwargs:
            return {"Vpcs": [v for v in self.vpcs if v["VpcId"] in kwargs["VpcIds"]]}
        return {"Vpcs": [v for v in self.vpcs if v.get("IsDefault")]}

    async def describe_subnets(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("describe_subnets", kwargs))
        vpc_id = kwargs["Filters"][0]["Values"][0]
        return {"Subnets": [s for s in self.subnets if s["VpcId"] == vpc_id]}

    async def describe_route_tables(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("describe_route_tables", kwargs))
        vpc_id = kwargs["Filters"][0]["Values"][0]
        return {"RouteTables": [t for t in self.route_tables if t["VpcId"] == vpc_id]}


def make_ec2(
    *,
    vpc_id: str = "vpc-default",
    cidr: str = "172.31.0.0/16",
    is_default: bool = True,
    public: tuple[tuple[str, str], ...] = (("subnet-b", "eu-west-1b"), ("subnet-a", "eu-west-1a")),
    private: tuple[tuple[str, str], ...] = (("subnet-p", "eu-west-1a"),),
) -> FakeEc2:
    """A VPC whose public subnets use an IGW route table and private ones the main table."""

    subnets = [
        {"SubnetId": sid, "VpcId": vpc_id, "AvailabilityZone": az} for sid, az in list(public) + list(private)
    ]
    route_tables = [
        {
            "RouteTableId": "rtb-main",
            "VpcId": vpc_id,
            "Associations": [{"Main": True}],
            "Routes": [{"DestinationCidrBlock": cidr, "GatewayId": "local"}],
        },
        {
            "RouteTableId": "rtb-public",
            "VpcId": vpc_id,
            "Associations": [{"Main": False, "SubnetId": sid} for sid, _ in public],
            "Routes": [
                {"DestinationCidrBlock": cidr, "GatewayId": "local"},
                {"DestinationCidrBlock": "0.0.0.0/0", "GatewayId": "igw-123"},
            ],
        },
    ]
    return FakeEc2(
        vpcs=[{"VpcId": vpc_id, "CidrBlock": cidr, "IsDefault": is_default}],
        subnets=subnets,
        route_tables=route_tables,
    )


class FakeRoute53:
    def __init__(self, zones: Optional[dict[str, str]] = None) -> None:
        self.zones = zones or {}
        self.calls: list[str] = []

    async def get_hosted_zone(self, *, Id: str) -> dict[str, Any]:
        self.calls.append(Id)
        if Id not in self.zones:
            raise client_error("NoSuchHostedZone", "GetHostedZone")
        return {"HostedZone": {"Id": f"/hostedzone/{Id}", "Name": f"{self.zones[Id]}."}}


class FakeSecretsManager:
    def __init__(self, secrets: Optional[dict[str, str]] = None) -> None:
        self.secrets = secrets or {}
        self.calls: list[str] = []

    async def get_secret_value(self, *, SecretId: str) -> dict[str, Any]:
        self.calls.append(SecretId)
        if SecretId not in self.secrets:
            raise client_error("ResourceNotFoundException", "GetSecretValue")
        return {"ARN": SecretId, "SecretString": self.secrets[SecretId]}


class FakeTransfer:
    def __init__(self) -> None:
        self.host_keys: dict[str, str] = {}
        self.calls: list[dict[str, str]] = []

    async def update_server(self, *, ServerId: str, HostKey: str) -> dict[str, Any]:
        self.calls.append({"ServerId": ServerId, "HostKey": HostKey})
        self.host_keys[ServerId] = HostKey
        return {"ServerId": ServerId}


class FakeS3:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.copies: list[dict[str, Any]] = []

    async def copy_object(self, **kwargs: Any) -> dict[str, Any]:
        if self.error is not None:
            raise self.error
        self.copies.append(kwargs)
        return {"CopyObjectResult": {"ETag": '"abc"'}}


def policy_permits(
    document: dict[str, Any],
    *,
    action: str,
    resource: str,
    prefix: Optional[str] = None,
) -> bool:
    """Minimal Allow-only evaluation of an IAM document (wildcards and StringLike s3:prefix)."""

    for statement in document["Statement"]:
        if statement.get("Effect") != "Allow":
            continue
        if not any(fnmatchcase(action, a) for a in statement["Action"]):
            continue
        if not any(fnmatchcase(resource, r) for r in statement["Resource"]):
            continue
        condition = statement.get("Condition")
        if condition:
            patterns = condition.get("StringLike", {}).get("s3:prefix", [])
            if prefix is None or not any(fnmatchcase(prefix, p) for p in patterns):
                continue
        return True
    return False
