"""Domain services package."""

from .aggregation import (
    bucket_donor_totals,
    check_record_integrity,
    compute_donor_giving_summary,
    compute_financial_summary,
    compute_ledger_statistics,
)
from .compliance import (
    build_quid_pro_quo_disclosures,
    build_restricted_fund_disclosures,
    deductible_amount,
    resolve_line_item,
    validate_category_compliance,
)
from .lifecycle import apply_edit, mark_receipt_sent, new_pending_donation, transition
from .normalization import (
    normalize_line_item,
    normalize_method,
    normalize_restriction,
    normalize_status,
)
from .sanitization import (
    ExportFieldPolicy,
    export_fields,
    require_subject_access,
    sanitize_donations,
    sanitize_donor_document,
    sanitize_donor_summary,
    sanitize_summary,
    validate_export_policy,
)
from .statements import (
    build_annual_statement,
    build_donation_receipt,
    next_receipt_number,
)
from .statistics import (
    add_contribution,
    average_is_consistent,
    compute_statistics,
    remove_contribution,
    roll_forward,
    statistics_differences,
)
from .validation import validate_category_draft, validate_donation_draft

__all__ = [
    "bucket_donor_totals",
    "check_record_integrity",
    "compute_donor_giving_summary",
    "compute_financial_summary",
    "compute_ledger_statistics",
    "build_quid_pro_quo_disclosures",
    "build_restricted_fund_disclosures",
    "deductible_amount",
    "resolve_line_item",
    "validate_category_compliance",
    "apply_edit",
    "mark_receipt_sent",
    "new_pending_donation",
    "transition",
    "normalize_line_item",
    "normalize_method",
    "normalize_restriction",
    "normalize_status",
    "ExportFieldPolicy",
    "export_fields",
    "require_subject_access",
    "sanitize_donations",
    "sanitize_donor_document",
    "sanitize_donor_summary",
    "sanitize_summary",
    "validate_export_policy",
    "build_annual_statement",
    "build_donation_receipt",
    "next_receipt_number",
    "add_contribution",
    "average_is_consistent",
    "compute_statistics",
    "roll_forward",
    "remove_contribution",
    "statistics_differences",
    "validate_category_draft",
    "validate_donation_draft",
]
