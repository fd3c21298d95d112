from __future__ import annotations

import logging
import re
from collections import Counter
from string import Template
from typing import Any

from pydantic import ValidationError

from sftp_stack.models.plan import (
    PolicyDocument,
    PolicyStatement,
    ScopedPolicy,
    ServiceIdentity,
    StorageIdentity,
    TransferUserPlan,
    UserAccessPlan,
    UserRolePlan,
    resource_ref,
)
from sftp_stack.models.stack_config import SftpUser
from sftp_stack.services.errors import UserConfigError

logger = logging.getLogger(__name__)

HOME_PREFIX = "home"

# Transfer Family user-name rule; also keeps names free of IAM wildcards and path separators.
USER_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_@.-]{2,99}$")

# Transfer Family scope-down policy. Placeholders are filled per user; the
# rendered document is validated against PolicyDocument.
SCOPE_DOWN_TEMPLATE: dict[str, Any] = {
    "Version": "2012-10-17",
    "Statement": [
        {
            "Sid": "AllowListingOfUserFolder",
            "Effect": "Allow",
            "Action": ["s3:ListBucket"],
            "Resource": ["arn:aws:s3:::${bucket_name}"],
            "Condition": {
                "StringLike": {
                    "s3:prefix": ["${home_prefix}/${user_name}/*", "${home_prefix}/${user_name}"],
                }
            },
        },
        {
            "Sid": "HomeDirObjectAccess",
            "Effect": "Allow",
            "Action": ["s3:PutObject", "s3:GetObject", "s3:GetObjectVersion"],
            "Resource": ["arn:aws:s3:::${bucket_name}/${home_prefix}/${user_name}/*"],
        },
    ],
}


def _render(node: Any, values: dict[str, str]) -> Any:
    if isinstance(node, str):
        return Template(node).substitute(values)
    if isinstance(node, list):
        return [_render(item, values) for item in node]
    if isinstance(node, dict):
        return {key: _render(value, values) for key, value in node.items()}
    return node


def render_scoped_policy(*, user_name: str, bucket_name: str) -> ScopedPolicy:
    rendered = _render(
        SCOPE_DOWN_TEMPLATE,
        {"bucket_name": bucket_name, "home_prefix": HOME_PREFIX, "user_name": user_name},
    )
    try:
        document = PolicyDocument.model_validate(rendered)
    except ValidationError as exc:
        raise UserConfigError(f"Generated policy for user {user_name!r} is not a valid policy document") from exc
    return ScopedPolicy(user_name=user_name, document=document)


def home_directory(*, bucket_name: str, user_name: str) -> str:
    return f"/{bucket_name}/{HOME_PREFIX}/{user_name}"


def _validate_users(users: list[SftpUser]) -> None:
    for index, user in enumerate(users):
        if not user.user_name.strip():
            raise UserConfigError(f"users[{index}]: userName must not be empty")
        if not USER_NAME_PATTERN.match(user.user_name.strip()):
            raise UserConfigError(
                f"users[{index}]: userName {user.user_name!r} must be 3-100 characters of letters, digits, _ @ . -"
            )
        if not user.public_key.strip():
            raise UserConfigError(f"users[{index}] ({user.user_name}): publicKey must not be empty")

    duplicates = [name for name, count in Counter(u.user_name for u in users).items() if count > 1]
    if duplicates:
        logger.warning("Duplicate SFTP user names in configuration: %s", ", ".join(sorted(duplicates)))


def plan_user_role(storage: StorageIdentity) -> UserRolePlan:
    return UserRolePlan(
        role_arn=resource_ref("sftpUserRole", "Arn"),
        assumed_by="transfer.amazonaws.com",
        statements=[
            PolicyStatement(sid="ListBucket", action=["s3:ListBucket"], resource=[storage.bucket_arn]),
            PolicyStatement(
                sid="ObjectAccess",
                action=["s3:PutObject", "s3:GetObject", "s3:GetObjectVersion"],
                resource=[f"{storage.bucket_arn}/*"],
            ),
        ],
    )


def plan_user_access(
    users: list[SftpUser],
    *,
    storage: StorageIdentity,
    identity: ServiceIdentity,
) -> UserAccessPlan:
    """One scoped policy and one transfer user per configured user.

    Every entry is checked before anything is generated, so a bad entry aborts the
    whole user set.
    """

    _validate_users(users)

    role = plan_user_role(storage)
    planned = []
    for index, user in enumerate(users):
        user_name = user.user_name.strip()
        planned.append(
            TransferUserPlan(
                logical_id=f"user{index}{re.sub(r'[^A-Za-z0-9]', '', user_name)}",
                user_name=user_name,
                server_id=identity.server_id,
                role_arn=role.role_arn,
                home_directory=home_directory(bucket_name=storage.bucket_name, user_name=user_name),
                ssh_public_keys=[user.public_key.strip()],
                policy=render_scoped_policy(user_name=user_name, bucket_name=storage.bucket_name),
            )
        )

    logger.info("User access planned: users=%d", len(planned))
    return UserAccessPlan(role=role, users=planned)
