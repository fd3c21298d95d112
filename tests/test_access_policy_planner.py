from __future__ import annotations

import pytest

from sftp_stack.models.plan import ServiceIdentity, StorageIdentity
from sftp_stack.models.stack_config import SftpUser
from sftp_stack.services.access_policy_planner import plan_user_access, render_scoped_policy
from sftp_stack.services.errors import UserConfigError
from tests.fakes import policy_permits

BUCKET = "sftp-server-sftp-123456789012-eu-west-1"
STORAGE = StorageIdentity(bucket_name=BUCKET, bucket_arn=f"arn:aws:s3:::{BUCKET}")
IDENTITY = ServiceIdentity(server_id="s-1", endpoint_name="s-1.server.transfer.eu-west-1.amazonaws.com")


def _users(*names: str) -> list[SftpUser]:
    return [SftpUser(user_name=name, public_key=f"ssh-ed25519 AAAA{name}") for name in names]


def test_policy_document_shape() -> None:
    document = render_scoped_policy(user_name="alice", bucket_name=BUCKET).document.to_json_dict()

    assert document["Version"] == "2012-10-17"
    listing, objects = document["Statement"]
    assert listing["Sid"] == "AllowListingOfUserFolder"
    assert listing["Action"] == ["s3:ListBucket"]
    assert listing["Resource"] == [f"arn:aws:s3:::{BUCKET}"]
    assert listing["Condition"] == {"StringLike": {"s3:prefix": ["home/alice/*", "home/alice"]}}
    assert objects["Action"] == ["s3:PutObject", "s3:GetObject", "s3:GetObjectVersion"]
    assert objects["Resource"] == [f"arn:aws:s3:::{BUCKET}/home/alice/*"]


def test_user_confined_to_own_home() -> None:
    access = plan_user_access(_users("alice", "bob"), storage=STORAGE, identity=IDENTITY)
    alice = access.policy_for("alice").document.to_json_dict()
    bucket_arn = f"arn:aws:s3:::{BUCKET}"

    assert policy_permits(alice, action="s3:ListBucket", resource=bucket_arn, prefix="home/alice/docs")
    assert policy_permits(alice, action="s3:ListBucket", resource=bucket_arn, prefix="home/alice")
    assert policy_permits(alice, action="s3:PutObject", resource=f"{bucket_arn}/home/alice/report.csv")

    assert not policy_permits(alice, action="s3:ListBucket", resource=bucket_arn, prefix="home/bob/")
    assert not policy_permits(alice, action="s3:ListBucket", resource=bucket_arn, prefix="")
    assert not policy_permits(alice, action="s3:GetObject", resource=f"{bucket_arn}/home/bob/report.csv")
    assert not policy_permits(alice, action="s3:GetObject", resource=f"{bucket_arn}/top-level.csv")
    assert not policy_permits(alice, action="s3:DeleteBucket", resource=bucket_arn)


def test_transfer_user_home_directory_and_keys() -> None:
    access = plan_user_access(_users("alice"), storage=STORAGE, identity=IDENTITY)
    (alice,) = access.users

    assert alice.home_directory == f"/{BUCKET}/home/alice"
    assert alice.ssh_public_keys == ["ssh-ed25519 AAAAalice"]
    assert alice.server_id == "s-1"
    assert alice.role_arn == access.role.role_arn


@pytest.mark.parametrize(
    "users",
    [
        [SftpUser(user_name="", public_key="ssh-rsa AAAA")],
        [SftpUser(user_name="alice", public_key="  ")],
        [SftpUser(user_name="alice", public_key="ssh-rsa AAAA"), SftpUser(user_name=" ", public_key="ssh-rsa B")],
    ],
)
def test_malformed_user_aborts_whole_set(users) -> None:
    with pytest.raises(UserConfigError):
        plan_user_access(users, storage=STORAGE, identity=IDENTITY)


def test_duplicate_names_are_warned_not_rejected(caplog) -> None:
    access = plan_user_access(_users("alice", "alice"), storage=STORAGE, identity=IDENTITY)

    assert len(access.users) == 2
    assert "Duplicate SFTP user names" in caplog.text


@pytest.mark.parametrize("name", ["*", "a*", "a?c", "../bob", "alice/bob", "$bucket_name", "ab"])
def test_unsafe_user_name_rejected_before_any_grant(name) -> None:
    users = [SftpUser(user_name="alice", public_key="ssh-rsa AAAA"), SftpUser(user_name=name, public_key="ssh-rsa B")]

    with pytest.raises(UserConfigError, match="userName"):
        plan_user_access(users, storage=STORAGE, identity=IDENTITY)


def test_wildcard_free_names_stay_in_own_home() -> None:
    access = plan_user_access(_users("a.b-c@corp", "alice"), storage=STORAGE, identity=IDENTITY)
    other = access.policy_for("a.b-c@corp").document.to_json_dict()

    assert not policy_permits(other, action="s3:GetObject", resource=f"arn:aws:s3:::{BUCKET}/home/alice/secret.csv")


def test_logical_ids_are_alphanumeric_and_unique() -> None:
    access = plan_user_access(_users("a.b", "ab", "j_doe@corp"), storage=STORAGE, identity=IDENTITY)
    logical_ids = [u.logical_id for u in access.users]

    assert logical_ids == ["user0ab", "user1ab", "user2jdoecorp"]
    assert all(lid.isalnum() for lid in logical_ids)
