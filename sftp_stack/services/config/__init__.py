"""Configuration package (Facade).

Re-exports the public config types so callers import from one stable path:

	from sftp_stack.services.config import PlannerSettings

The stack configuration *document* (the planner's input) is a pydantic model in
``sftp_stack.models.stack_config``; the types here are runtime wiring (where the
document lives, which region/account the plan targets, handler environment).
"""

from sftp_stack.services.config.archive_config import ArchiveConfig
from sftp_stack.services.config.planner_config import PlannerSettings
from sftp_stack.services.config.stack_config_source import StackConfigSource, load_stack_config

__all__ = ["ArchiveConfig", "PlannerSettings", "StackConfigSource", "load_stack_config"]
