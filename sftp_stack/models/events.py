from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel, to_pascal


class HostKeyResourceProperties(BaseModel):
    """Properties passed to the host key custom resource (camelCase on the wire)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel, extra="ignore")

    server_id: str = ""
    host_key_secret_arn: str = ""
    host_key_version: str = ""


class HostKeyEvent(BaseModel):
    """CloudFormation custom resource event (PascalCase on the wire)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_pascal, extra="ignore")

    request_type: str
    request_id: str = ""
    physical_resource_id: Optional[str] = None
    resource_properties: HostKeyResourceProperties = Field(default_factory=HostKeyResourceProperties)
    old_resource_properties: Optional[HostKeyResourceProperties] = None


class HostKeyResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_pascal)

    physical_resource_id: Optional[str] = None


class ArchivedObject(BaseModel):
    source_bucket: str
    key: str
    archive_bucket: str
