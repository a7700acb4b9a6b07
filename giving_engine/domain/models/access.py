"""Domain model for the requester's access context."""

from dataclasses import dataclass

from giving_engine.domain.constants import Role


@dataclass(frozen=True)
class AccessContext:
    """Role and subject of the party requesting data.

    Attributes:
        role: Access role resolved for the request.
        subject_id: Donor id of the requester for self-access requests.
    """

    role: Role
    subject_id: str | None = None


__all__ = ["AccessContext"]
