from __future__ import annotations

import logging
from typing import Any, Optional, cast

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from sftp_stack.models.plan import AddressAllocation, IngressRule, ResolvedNetwork, resource_ref
from sftp_stack.services.errors import ExternalLookupError, NetworkError

logger = logging.getLogger(__name__)

ANY_IPV4 = "0.0.0.0/0"


class NetworkService:
    """Resolves the VPC the transfer endpoint binds to.

    Mirrors what a CDK ``Vpc.fromLookup`` does: the VPC is found by id (or the
    account's default VPC), and a subnet counts as public when its route table
    routes to an internet gateway.
    """

    def __init__(self, *, region_name: Optional[str] = None, session: Any = None) -> None:
        self._region_name = region_name
        self._session = session if session is not None else aioboto3.Session()

    def _client(self) -> Any:
        return self._session.client("ec2", region_name=self._region_name)

    async def resolve(self, custom_vpc_id: Optional[str] = None) -> ResolvedNetwork:
        try:
            async with cast(Any, self._client()) as ec2:
                vpc = await self._lookup_vpc(ec2, custom_vpc_id)
                vpc_id = vpc["VpcId"]
                subnets_resp = await ec2.describe_subnets(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}])
                tables_resp = await ec2.describe_route_tables(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}])
        except (ClientError, BotoCoreError) as exc:
            logger.exception("VPC lookup failed")
            raise ExternalLookupError(f"Failed to look up VPC (vpc_id={custom_vpc_id or 'default'})") from exc

        subnets = subnets_resp.get("Subnets") or []
        route_tables = tables_resp.get("RouteTables") or []
        public = self._public_subnets(subnets=subnets, route_tables=route_tables)
        if not public:
            raise NetworkError("no public subnet available")

        network = ResolvedNetwork(
            vpc_id=vpc_id,
            cidr_block=vpc["CidrBlock"],
            subnet_ids=[s["SubnetId"] for s in public],
        )
        logger.info(
            "Network resolved: vpc=%s cidr=%s public_subnets=%d (of %d)",
            network.vpc_id,
            network.cidr_block,
            len(network.subnet_ids),
            len(subnets),
        )
        return network

    @staticmethod
    async def _lookup_vpc(ec2: Any, custom_vpc_id: Optional[str]) -> dict[str, Any]:
        if custom_vpc_id:
            resp = await ec2.describe_vpcs(VpcIds=[custom_vpc_id])
        else:
            resp = await ec2.describe_vpcs(Filters=[{"Name": "isDefault", "Values": ["true"]}])

        vpcs = resp.get("Vpcs") or []
        if not vpcs:
            target = custom_vpc_id or "default VPC"
            raise ExternalLookupError(f"VPC not found: {target}")
        return vpcs[0]

    @staticmethod
    def _routes_to_internet(table: dict[str, Any]) -> bool:
        return any(str(route.get("GatewayId") or "").startswith("igw-") for route in table.get("Routes") or [])

    @classmethod
    def _public_subnets(
        cls,
        *,
        subnets: list[dict[str, Any]],
        route_tables: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        main_table: Optional[dict[str, Any]] = None
        table_for_subnet: dict[str, dict[str, Any]] = {}
        for table in route_tables:
            for assoc in table.get("Associations") or []:
                if assoc.get("Main"):
                    main_table = table
                subnet_id = assoc.get("SubnetId")
                if subnet_id:
                    table_for_subnet[subnet_id] = table

        public = []
        for subnet in subnets:
            table = table_for_subnet.get(subnet["SubnetId"], main_table)
            if table is not None and cls._routes_to_internet(table):
                public.append(subnet)

        return sorted(public, key=lambda s: (s.get("AvailabilityZone") or "", s["SubnetId"]))


def derive_ingress_rules(allow_cidrs: list[str], vpc_cidr: str, port: int = 22) -> list[IngressRule]:
    """Allow-list present: one rule per range plus the VPC's own block. Absent: open to all."""

    if not allow_cidrs:
        return [IngressRule(cidr=ANY_IPV4, port=port, description="allow public SFTP access")]

    rules = [IngressRule(cidr=cidr, port=port, description="allow external SFTP access") for cidr in allow_cidrs]
    rules.append(IngressRule(cidr=vpc_cidr, port=port, description="allow internal SFTP access"))
    return rules


def plan_address_allocations(subnet_ids: list[str]) -> list[AddressAllocation]:
    allocations = []
    for subnet_id in subnet_ids:
        logical_id = f"eip{subnet_id}"
        allocations.append(
            AddressAllocation(
                logical_id=logical_id,
                subnet_id=subnet_id,
                allocation_id=resource_ref(logical_id, "AllocationId"),
            )
        )
    return allocations
