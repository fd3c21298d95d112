from __future__ import annotations

import asyncio
import logging
from typing import Optional

from sftp_stack.models.plan import StackPlan
from sftp_stack.models.stack_config import StackConfig
from sftp_stack.services.access_policy_planner import plan_user_access
from sftp_stack.services.config import PlannerSettings
from sftp_stack.services.config_validator import validate_stack_config
from sftp_stack.services.event_pipeline_planner import plan_event_pipeline
from sftp_stack.services.hostname_service import HostnameService
from sftp_stack.services.network_service import NetworkService, derive_ingress_rules, plan_address_allocations
from sftp_stack.services.service_planner import plan_host_key_rotation, plan_service
from sftp_stack.services.storage_planner import plan_storage

logger = logging.getLogger(__name__)


class StackPlanner:
    """Composes the full SFTP stack plan from one configuration.

    Stages run in order: validate -> (network | hostname) -> service -> host key
    -> storage -> user access -> event pipeline. Network and hostname lookups are
    independent and run concurrently; every other stage is a pure function of the
    outputs before it. Any error aborts the run and nothing is returned.
    """

    def __init__(
        self,
        *,
        settings: PlannerSettings,
        network: NetworkService,
        hostname: HostnameService,
    ) -> None:
        self._settings = settings
        self._network = network
        self._hostname = hostname

    async def plan(self, config: StackConfig, *, server_id: Optional[str] = None) -> StackPlan:
        validated = validate_stack_config(config)

        network, hostname = await asyncio.gather(
            self._network.resolve(validated.vpc_attr.custom_vpc_id),
            self._hostname.resolve(validated.custom_hostname),
        )

        ingress_rules = derive_ingress_rules(
            validated.sftp_attr.allow_cidrs,
            network.cidr_block,
            port=self._settings.transfer_port,
        )
        service = plan_service(
            network=network,
            ingress_rules=ingress_rules,
            allocations=plan_address_allocations(network.subnet_ids),
            hostname=hostname,
            settings=self._settings,
            server_id=server_id,
        )
        host_key_rotation = plan_host_key_rotation(validated.custom_host_key, service.identity, self._settings)

        storage = plan_storage(validated.sftp_attr, self._settings)
        user_access = plan_user_access(validated.users, storage=storage, identity=service.identity)
        notifications = plan_event_pipeline(validated, storage)

        logger.info(
            "Stack plan complete: stack=%s public_name=%s users=%d subscribers=%d",
            self._settings.stack_name,
            service.identity.public_name,
            len(user_access.users),
            len(notifications.subscriptions),
        )
        return StackPlan(
            stack_name=self._settings.stack_name,
            region=self._settings.region_name,
            network=network,
            ingress_rules=ingress_rules,
            hostname=hostname,
            service=service,
            host_key_rotation=host_key_rotation,
            storage=storage,
            user_access=user_access,
            notifications=notifications,
        )
