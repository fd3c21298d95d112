from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ConfigModel(BaseModel):
    """Base for configuration sections.

    The document on disk uses camelCase keys (``customVpcId``); Python code uses
    snake_case field names. Models are frozen: configuration is read-only once loaded.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class VpcAttr(_ConfigModel):
    custom_vpc_id: Optional[str] = None


class SftpAttr(_ConfigModel):
    allow_cidrs: list[str] = Field(default_factory=list)
    move_to_archive: bool = False


class CustomHostKey(_ConfigModel):
    use_custom_key: bool = False
    host_key_secret_arn: Optional[str] = None
    host_key_version: Optional[str] = None


class DnsAttr(_ConfigModel):
    zone_name: Optional[str] = None
    hosted_zone_id: Optional[str] = None


class CustomHostname(_ConfigModel):
    use_custom_hostname: bool = False
    dns_attr: DnsAttr = Field(default_factory=DnsAttr)
    sftp_hostname: Optional[str] = None
    certificate_arn: Optional[str] = None


class SftpUser(_ConfigModel):
    user_name: str = Field(..., description="Transfer user name; also the home folder name")
    public_key: str = Field(..., description="SSH public key material")


class StackConfig(_ConfigModel):
    vpc_attr: VpcAttr = Field(default_factory=VpcAttr)
    sftp_attr: SftpAttr = Field(default_factory=SftpAttr)
    custom_host_key: CustomHostKey = Field(default_factory=CustomHostKey)
    custom_hostname: CustomHostname = Field(default_factory=CustomHostname)
    users: list[SftpUser] = Field(default_factory=list)
    notification_emails: list[str] = Field(default_factory=list)
