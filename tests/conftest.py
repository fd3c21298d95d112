from __future__ import annotations

import pytest

from sftp_stack.services.config import PlannerSettings
from sftp_stack.services.hostname_service import HostnameService
from sftp_stack.services.network_service import NetworkService
from sftp_stack.services.stack_planner import StackPlanner
from tests.fakes import FakeRoute53, FakeSession, make_ec2

ZONE_ID = "Z0123456789ABC"
ZONE_NAME = "example.com"


@pytest.fixture
def settings() -> PlannerSettings:
    return PlannerSettings(region_name="eu-west-1", account_id="123456789012")


@pytest.fixture
def ec2():
    return make_ec2()


@pytest.fixture
def route53() -> FakeRoute53:
    return FakeRoute53({ZONE_ID: ZONE_NAME})


@pytest.fixture
def session(ec2, route53) -> FakeSession:
    return FakeSession(ec2=ec2, route53=route53)


@pytest.fixture
def planner(settings, session) -> StackPlanner:
    return StackPlanner(
        settings=settings,
        network=NetworkService(region_name=settings.region_name, session=session),
        hostname=HostnameService(session=session),
    )
