from __future__ import annotations

from sftp_stack.models.stack_config import StackConfig
from sftp_stack.services.config import ArchiveConfig, PlannerSettings, StackConfigSource
from sftp_stack.services.hostname_service import HostnameService
from sftp_stack.services.network_service import NetworkService
from sftp_stack.services.setup.archive_service import ArchiveService
from sftp_stack.services.setup.host_key_service import HostKeyRotationService
from sftp_stack.services.stack_planner import StackPlanner


def get_planner_settings() -> PlannerSettings:
    return PlannerSettings.from_env()


def get_stack_planner() -> StackPlanner:
    """FastAPI dependency provider for a StackPlanner wired to live AWS lookups."""

    settings = get_planner_settings()
    return StackPlanner(
        settings=settings,
        network=NetworkService(region_name=settings.region_name),
        hostname=HostnameService(),
    )


def get_stack_config() -> StackConfig:
    """Dependency provider for the configuration document named by SFTP_STACK_CONFIG_PATH."""

    return StackConfigSource.from_env().load()


def get_host_key_service() -> HostKeyRotationService:
    return HostKeyRotationService()


def get_archive_service() -> ArchiveService:
    return ArchiveService(ArchiveConfig.from_env())
