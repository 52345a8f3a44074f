"""
Form Validation Models

Validation runs on raw form input BEFORE anything reaches storage.
A failed validation means no write happens at all.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from homebooks.models.common import utc_now


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Form field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_number', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of validating one submitted form.

    `cleaned` holds the parsed values (numbers as Decimal, blank
    list entries dropped) and is only meaningful when is_valid.
    """

    record_type: str = Field(
        ...,
        description="Which form was validated (e.g., 'goal')"
    )
    validated_at: datetime = Field(
        default_factory=utc_now
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    cleaned: dict[str, Any] = Field(
        default_factory=dict,
        description="Parsed form values ready to build a record"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]
