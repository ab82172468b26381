"""
S3 权限端点测试
"""
import asyncio
import json

from fastapi import status
from sqlalchemy import select

from db.models import KeyPolicy

CUSTOM_POLICY = {
    "version": "2012-10-17",
    "id": "UploadOnly",
    "statements": [
        {"effect": "Allow", "actions": ["s3:PutObject"], "resources": ["bucket-1/uploads"]},
    ],
}


def test_list_presets(client, readonly_headers):
    response = client.get("/s3/policies/presets", headers=readonly_headers)
    assert response.status_code == status.HTTP_200_OK

    presets = response.json()
    assert set(presets) == {"ReadOnly", "ReadWrite", "FullAccess", "ObjectLockManager"}

    read_only = presets["ReadOnly"]
    assert read_only["name"] == "ReadOnly"
    assert read_only["description"] == "Allows read-only access to objects and bucket listing"
    assert read_only["policy"]["id"] == "ReadOnlyPolicy"
    assert json.loads(read_only["policy_json"])["statements"][0]["actions"] == [
        "s3:GetObject", "s3:ListBucket", "s3:GetBucketLocation",
    ]


def test_validate_valid_policy(client, user_headers):
    response = client.post("/s3/policies/validate", json=CUSTOM_POLICY, headers=user_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "valid": True,
        "errors": [],
        "message": "Policy is valid",
        "legacy_equivalent": {"read": False, "write": True, "owner": False},
    }


def test_validate_invalid_policy(client, user_headers):
    """校验失败返回 200 和违规列表，而不是错误状态码"""
    response = client.post("/s3/policies/validate", json={}, headers=user_headers)
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["valid"] is False
    assert "Policy version is required" in data["errors"]
    assert "Policy must contain at least one statement" in data["errors"]
    assert data["legacy_equivalent"] is None


def test_validate_malformed_policy(client, user_headers):
    """无法解析的策略体返回 400 VALIDATION_ERROR，逐条列出字段错误"""
    response = client.post(
        "/s3/policies/validate",
        json={
            "version": 1,
            "statements": [{"effect": "Allow", "actions": "s3:GetObject", "resources": ["*"]}],
        },
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    errors = body["details"]["errors"]
    assert len(errors) == 2
    assert any(e.startswith("version: ") for e in errors)
    assert any(e.startswith("statements.0.actions: ") for e in errors)


def test_get_key_permissions_legacy(client, user_headers):
    response = client.get("/buckets/bucket-1/keys/GK-writer/permissions", headers=user_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "access_key_id": "GK-writer",
        "name": "writer-key",
        "legacy_mode": True,
        "legacy_permissions": {"read": True, "write": True, "owner": False},
        "s3_policy": None,
        "policy_json": None,
    }


def test_get_key_permissions_unknown_key(client, user_headers):
    response = client.get("/buckets/bucket-1/keys/GK-missing/permissions", headers=user_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error_code"] == "NOT_FOUND"


def test_get_key_permissions_unknown_bucket(client, user_headers):
    response = client.get("/buckets/nope/keys/GK-writer/permissions", headers=user_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_update_with_preset(client, user_headers, garage, session_factory):
    response = client.put(
        "/buckets/bucket-1/keys/GK-reader/permissions",
        json={"policy_type": "preset", "policy_name": "ReadWrite", "legacy_mode": False},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "message": "Key permissions updated successfully",
        "access_key_id": "GK-reader",
        "legacy_mode": False,
        "policy_applied": True,
        "legacy_permissions": {"read": True, "write": True, "owner": False},
    }

    # Garage 只收到压缩后的旧版权限
    assert garage.allow_calls == [{
        "bucket_id": "bucket-1",
        "access_key_id": "GK-reader",
        "permissions": {"read": True, "write": True, "owner": False},
    }]

    # 本地记录了完整策略，读取时返回策略
    response = client.get("/buckets/bucket-1/keys/GK-reader/permissions", headers=user_headers)
    data = response.json()
    assert data["legacy_mode"] is False
    assert data["s3_policy"]["id"] == "ReadWritePolicy"
    assert json.loads(data["policy_json"])["id"] == "ReadWritePolicy"

    async def load_record():
        async with session_factory() as db:
            result = await db.execute(select(KeyPolicy))
            return result.scalars().all()

    records = asyncio.run(load_record())
    assert len(records) == 1
    assert records[0].legacy_write is True


def test_update_with_custom_policy(client, user_headers, garage):
    response = client.put(
        "/buckets/bucket-1/keys/GK-writer/permissions",
        json={"policy_type": "custom", "policy": CUSTOM_POLICY},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["legacy_permissions"] == {"read": False, "write": True, "owner": False}


def test_update_with_invalid_custom_policy(client, user_headers, garage):
    """结构不合法的自定义策略被拒绝，不会写入 Garage"""
    response = client.put(
        "/buckets/bucket-1/keys/GK-writer/permissions",
        json={"policy_type": "custom", "policy": {"version": "2012-10-17", "statements": [{"effect": "Allow"}]}},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert body["details"]["errors"] == [
        "Statement 0: Must contain at least one action",
        "Statement 0: Must contain at least one resource",
    ]
    assert garage.allow_calls == []


def test_update_with_malformed_custom_policy(client, user_headers, garage):
    response = client.put(
        "/buckets/bucket-1/keys/GK-writer/permissions",
        json={"policy_type": "custom", "policy": {"version": "2012-10-17", "statements": "nope"}},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert body["details"]["errors"][0].startswith("policy.statements: ")
    assert garage.allow_calls == []


def test_update_with_unknown_preset(client, user_headers, garage):
    response = client.put(
        "/buckets/bucket-1/keys/GK-writer/permissions",
        json={"policy_type": "preset", "policy_name": "Everything"},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert garage.allow_calls == []


def test_update_legacy_mode_clears_policy(client, user_headers, garage):
    client.put(
        "/buckets/bucket-1/keys/GK-writer/permissions",
        json={"policy_type": "preset", "policy_name": "FullAccess"},
        headers=user_headers,
    )

    response = client.put(
        "/buckets/bucket-1/keys/GK-writer/permissions",
        json={"legacy_mode": True, "legacy": {"read": True, "write": False, "owner": False}},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["policy_applied"] is False

    data = client.get("/buckets/bucket-1/keys/GK-writer/permissions", headers=user_headers).json()
    assert data["legacy_mode"] is True
    assert data["s3_policy"] is None
    assert data["legacy_permissions"] == {"read": True, "write": False, "owner": False}


def test_update_missing_fields(client, user_headers):
    response = client.put(
        "/buckets/bucket-1/keys/GK-writer/permissions",
        json={"legacy_mode": True},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.put(
        "/buckets/bucket-1/keys/GK-writer/permissions",
        json={"legacy_mode": False},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
