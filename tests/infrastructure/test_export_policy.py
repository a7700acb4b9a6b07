"""Tests for the export whitelist loader."""

import json

import pytest

from giving_engine.domain.constants import DONOR_IDENTITY_FIELDS, Role
from giving_engine.domain.services.sanitization import DONATION_FIELDS
from giving_engine.infrastructure.export_policy import load_export_policy


def test_bundled_policy_is_valid():
    """The shipped configuration respects the access boundaries."""
    policy = load_export_policy()

    assert set(policy.fields_for(Role.FULL_ACCESS)) == set(DONATION_FIELDS)
    assert not set(policy.fields_for(Role.AGGREGATE_ACCESS)) & set(
        DONOR_IDENTITY_FIELDS
    )
    assert "donor_name" in policy.fields_for(Role.SELF_ACCESS)


def test_unknown_role_is_rejected(tmp_path):
    """Role names must be known."""
    path = tmp_path / "fields.json"
    path.write_text(json.dumps({"auditor": ["id"]}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_export_policy(path)


def test_identity_leak_is_rejected(tmp_path):
    """Aggregate whitelists naming donor identity fail validation."""
    path = tmp_path / "fields.json"
    path.write_text(
        json.dumps(
            {
                "full_access": list(DONATION_FIELDS),
                "aggregate_access": ["id", "donor_id"],
                "self_access": ["id"],
            }
        ),
        encoding="utf-8",
    )

    with pytest.raises(ValueError):
        load_export_policy(path)


def test_non_object_file_is_rejected(tmp_path):
    """The file must map roles to field lists."""
    path = tmp_path / "fields.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError):
        load_export_policy(path)
