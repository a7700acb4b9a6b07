"""Typed errors raised by the giving engine.

Every error carries a machine-readable ``code`` so callers can branch on the
failed invariant without parsing messages.
"""


class GivingEngineError(Exception):
    """Base class for all giving engine errors."""

    code = "GIVING_ENGINE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(GivingEngineError):
    """A donation or category failed validation."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class AmountValidationError(ValidationError):
    code = "INVALID_AMOUNT"


class DateValidationError(ValidationError):
    code = "INVALID_DATE"


class TaxonomyValidationError(ValidationError):
    code = "INVALID_TAXONOMY"


class IdentityValidationError(ValidationError):
    code = "INCONSISTENT_IDENTITY"


class CategoryValidationError(ValidationError):
    code = "INVALID_CATEGORY"


class LifecycleTransitionError(ValidationError):
    """A status transition is not allowed from the current state."""

    code = "INVALID_TRANSITION"

    def __init__(self, message: str, current_status: str, target_status: str) -> None:
        super().__init__(message, field="status")
        self.current_status = current_status
        self.target_status = target_status


class BatchValidationError(ValidationError):
    """One or more items of a batch failed validation."""

    code = "BATCH_INVALID"

    def __init__(self, errors: list[tuple[int, ValidationError]]) -> None:
        super().__init__(f"{len(errors)} donations failed validation")
        self.errors = errors


class NotFoundError(GivingEngineError):
    code = "NOT_FOUND"

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class ConsistencyError(GivingEngineError):
    """Recalculated category totals disagree with incremental totals."""

    code = "STATISTICS_INCONSISTENT"

    def __init__(self, category_id: str, differences: dict[str, tuple]) -> None:
        fields = ", ".join(sorted(differences))
        super().__init__(
            f"Category {category_id} statistics drifted on: {fields}"
        )
        self.category_id = category_id
        self.differences = differences


class AccessError(GivingEngineError):
    """The requester's role or subject does not permit the operation."""

    code = "UNAUTHORIZED_ACCESS"

    def __init__(self, message: str, role: str, subject_id: str | None) -> None:
        super().__init__(message)
        self.role = role
        self.subject_id = subject_id


class DataIntegrityError(GivingEngineError):
    """A stored donation record is malformed."""

    code = "MALFORMED_RECORD"

    def __init__(self, record_id: str | None, reason: str) -> None:
        super().__init__(f"Malformed donation {record_id}: {reason}")
        self.record_id = record_id
        self.reason = reason


__all__ = [
    "GivingEngineError",
    "ValidationError",
    "AmountValidationError",
    "DateValidationError",
    "TaxonomyValidationError",
    "IdentityValidationError",
    "CategoryValidationError",
    "LifecycleTransitionError",
    "BatchValidationError",
    "NotFoundError",
    "ConsistencyError",
    "AccessError",
    "DataIntegrityError",
]
