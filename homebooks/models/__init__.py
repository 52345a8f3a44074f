"""
Data Models Package

This package contains all Pydantic models used in Homebooks.
Every record written to storage must conform to these schemas.
"""

from homebooks.models.common import ActionResult, Money, RecordModel, new_record_id
from homebooks.models.invoice import (
    Invoice,
    InvoiceEditError,
    InvoiceItem,
    InvoiceStats,
    InvoiceStatus,
    calculate_totals,
    new_invoice,
)
from homebooks.models.wealth import (
    FamilyMember,
    FamilyMemberCreate,
    FamilyMemberPatch,
    GoalCategory,
    GoalPriority,
    IncomeStatus,
    IncomeStream,
    IncomeStreamCreate,
    IncomeStreamPatch,
    IncomeType,
    Investment,
    InvestmentCreate,
    InvestmentPatch,
    InvestmentType,
    Opportunity,
    OpportunityCreate,
    OpportunityPatch,
    OpportunityStatus,
    OpportunityType,
    RiskLevel,
    WealthData,
    WealthGoal,
    WealthGoalCreate,
    WealthGoalPatch,
    WealthStats,
)
from homebooks.models.validation import ValidationIssue, ValidationResult
from homebooks.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Common
    "ActionResult",
    "Money",
    "RecordModel",
    "new_record_id",
    # Invoice models
    "Invoice",
    "InvoiceEditError",
    "InvoiceItem",
    "InvoiceStats",
    "InvoiceStatus",
    "calculate_totals",
    "new_invoice",
    # Wealth models
    "FamilyMember",
    "FamilyMemberCreate",
    "FamilyMemberPatch",
    "GoalCategory",
    "GoalPriority",
    "IncomeStatus",
    "IncomeStream",
    "IncomeStreamCreate",
    "IncomeStreamPatch",
    "IncomeType",
    "Investment",
    "InvestmentCreate",
    "InvestmentPatch",
    "InvestmentType",
    "Opportunity",
    "OpportunityCreate",
    "OpportunityPatch",
    "OpportunityStatus",
    "OpportunityType",
    "RiskLevel",
    "WealthData",
    "WealthGoal",
    "WealthGoalCreate",
    "WealthGoalPatch",
    "WealthStats",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
