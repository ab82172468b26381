"""
旧版权限与 S3 策略转换测试
"""
import itertools

import pytest

from models.s3_policy import LegacyPermissions, S3Policy, S3Statement
from services.policy_bridge import (
    CONVERTED_POLICY_ID,
    POLICY_VERSION,
    legacy_to_policy,
    policy_to_legacy,
)
from services.preset_policies import get_preset_policy


@pytest.mark.parametrize("read,write,owner", list(itertools.product([False, True], repeat=3)))
def test_legacy_round_trip(read, write, owner):
    """从旧版权限出发的往返是幂等的"""
    legacy = LegacyPermissions(read=read, write=write, owner=owner)
    assert policy_to_legacy(legacy_to_policy(legacy)) == legacy


def test_legacy_to_policy_shape():
    policy = legacy_to_policy(LegacyPermissions(read=True, owner=True))

    assert policy.version == POLICY_VERSION
    assert policy.id == CONVERTED_POLICY_ID
    assert len(policy.statements) == 1

    statement = policy.statements[0]
    assert statement.effect == "Allow"
    assert statement.resources == ["*"]
    assert statement.actions == [
        "s3:GetObject", "s3:ListBucket", "s3:GetBucketLocation",
        "s3:GetBucketAcl", "s3:PutBucketAcl",
        "s3:GetBucketPolicy", "s3:PutBucketPolicy", "s3:DeleteBucketPolicy",
    ]


def test_no_legacy_permissions_gives_empty_allow():
    policy = legacy_to_policy(LegacyPermissions())
    assert policy.statements[0].actions == []


def test_deny_statements_are_ignored():
    policy = S3Policy(version=POLICY_VERSION, statements=[
        S3Statement(effect="Deny", actions=["s3:GetObject", "s3:PutObject"], resources=["*"]),
    ])
    assert policy_to_legacy(policy) == LegacyPermissions()


def test_wildcard_action_only_sets_owner():
    """s3:* 只映射为 owner，不会隐含 read / write"""
    legacy = policy_to_legacy(get_preset_policy("FullAccess"))
    assert legacy == LegacyPermissions(read=False, write=False, owner=True)


def test_partial_write_actions():
    policy = S3Policy(version=POLICY_VERSION, statements=[
        S3Statement(effect="Allow", actions=["s3:DeleteObject"], resources=["bucket-1"]),
    ])
    assert policy_to_legacy(policy) == LegacyPermissions(write=True)


def test_object_lock_manager_collapses_to_read_write():
    legacy = policy_to_legacy(get_preset_policy("ObjectLockManager"))
    assert legacy == LegacyPermissions(read=True, write=True, owner=False)
