"""Loader for the per-role export field whitelists."""

import json
from pathlib import Path

from giving_engine.domain.constants import Role
from giving_engine.domain.services.sanitization import (
    ExportFieldPolicy,
    validate_export_policy,
)
from giving_engine.infrastructure.settings import DEFAULT_EXPORT_FIELDS_FILE


def load_export_policy(path: Path | str | None = None) -> ExportFieldPolicy:
    """Read and validate the export whitelist JSON file.

    Args:
        path: JSON file mapping role names to field lists; the bundled
            configuration is used when omitted.

    Returns:
        ExportFieldPolicy: The validated policy.

    Raises:
        ValueError: If the file names an unknown role or field, or breaks
            the access boundaries.
    """
    source = Path(path) if path is not None else DEFAULT_EXPORT_FIELDS_FILE
    with source.open(encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        raise ValueError(f"Export fields file must hold an object: {source}")
    fields_by_role = {}
    for role_name, fields in raw.items():
        try:
            role = Role(role_name)
        except ValueError:
            raise ValueError(f"Unknown role in export fields: {role_name}")
        fields_by_role[role] = tuple(fields)
    policy = ExportFieldPolicy(fields_by_role=fields_by_role)
    validate_export_policy(policy)
    return policy


__all__ = ["load_export_policy"]
