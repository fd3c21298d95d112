from __future__ import annotations


class PlanningError(RuntimeError):
    """Base class for failures that abort a planning run."""


class ConfigError(PlanningError):
    pass


class NetworkError(PlanningError):
    pass


class UserConfigError(PlanningError):
    pass


class ExternalLookupError(PlanningError):
    pass
