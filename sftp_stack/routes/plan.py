from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from sftp_stack.models.plan import StackPlan
from sftp_stack.models.stack_config import StackConfig
from sftp_stack.services.dependencies import get_stack_config, get_stack_planner
from sftp_stack.services.stack_planner import StackPlanner

router = APIRouter(prefix="/plan", tags=["plan"])


@router.post("", response_model=StackPlan)
async def plan_from_body(
    config: StackConfig = Body(...),
    planner: StackPlanner = Depends(get_stack_planner),
) -> StackPlan:
    return await planner.plan(config)


@router.get("", response_model=StackPlan)
async def plan_from_configured_file(
    config: StackConfig = Depends(get_stack_config),
    planner: StackPlanner = Depends(get_stack_planner),
) -> StackPlan:
    return await planner.plan(config)
