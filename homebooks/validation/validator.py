"""
Two-Stage Form Validation

DESIGN DECISION: Form input is validated before ANY storage call.
A rejected form writes nothing.

STAGE 1 - FORM CHECKS:
- Required fields present and not blank
- Numeric fields parse as numbers
- Blank optional numbers default to zero
- Blank list entries dropped

STAGE 2 - RECORD CHECKS:
- The cleaned values are run through the record's pydantic model
  (enum values, ranges such as target amount > 0, date formats)

Forms are plain dicts of what the user typed. Keys may be the
stored camelCase names ("monthlyAmount") or snake_case ("monthly_amount").
"""

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel

from homebooks.models.common import ZERO, drop_blank
from homebooks.models.invoice import Invoice
from homebooks.models.validation import ValidationIssue, ValidationResult
from homebooks.models.wealth import (
    FamilyMemberCreate,
    IncomeStreamCreate,
    InvestmentCreate,
    OpportunityCreate,
    WealthGoalCreate,
)


@dataclass(frozen=True)
class FormRules:
    """What one form requires before its record can be built."""
    model: type[BaseModel]
    required: tuple[str, ...]
    numeric: tuple[str, ...] = ()
    zero_if_blank: tuple[str, ...] = ()
    integer: tuple[str, ...] = ()
    lists: tuple[str, ...] = ()


FORM_RULES: dict[str, FormRules] = {
    "income_stream": FormRules(
        model=IncomeStreamCreate,
        required=("name", "monthly_amount"),
        numeric=("monthly_amount",),
    ),
    "investment": FormRules(
        model=InvestmentCreate,
        required=("name", "current_value", "initial_investment"),
        numeric=(
            "current_value",
            "initial_investment",
            "monthly_contribution",
            "performance_percent",
        ),
        zero_if_blank=("monthly_contribution", "performance_percent"),
    ),
    "goal": FormRules(
        model=WealthGoalCreate,
        required=("title", "target_amount", "target_date"),
        numeric=("target_amount", "current_amount"),
        zero_if_blank=("current_amount",),
    ),
    "opportunity": FormRules(
        model=OpportunityCreate,
        required=("title", "potential_income"),
        numeric=("potential_income",),
        lists=("pros", "cons", "next_steps"),
    ),
    "family_member": FormRules(
        model=FamilyMemberCreate,
        required=("name",),
        integer=("age",),
        lists=("skills",),
    ),
}


def _lookup(form: Mapping[str, Any], name: str) -> Any:
    if name in form:
        return form[name]
    return form.get(to_camel(name))


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return not drop_blank([str(v) for v in value])
    return False


def _label(name: str) -> str:
    return name.replace("_", " ").capitalize()


def _to_whole_number(value: Any) -> int:
    """Accept 30, "30", 30.0 and "30.0"; reject 30.5."""
    number = Decimal(str(value).strip())
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError(f"Not a whole number: {value!r}")
    return int(number)


class RecordValidator:
    """
    Validates submitted forms for the wealth records, and checks
    invoices before save.

    Usage:
        result = RecordValidator().validate_form("goal", form)
        if result.is_valid:
            goal = WealthGoalCreate.model_validate(result.cleaned)
    """

    def _validate_schema(
        self,
        rules: FormRules,
        form: Mapping[str, Any],
    ) -> tuple[dict[str, Any], list[ValidationIssue]]:
        """
        Stage 1: required fields, number parsing, list cleanup.

        Returns: (cleaned_values, list_of_issues)
        """
        issues = []
        cleaned: dict[str, Any] = {}

        for name in rules.required:
            if _is_blank(_lookup(form, name)):
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="missing",
                    message=f"{_label(name)} is required",
                    severity="error",
                ))

        for name, info in rules.model.model_fields.items():
            value = _lookup(form, name)

            if name in rules.lists:
                if isinstance(value, str):
                    value = value.splitlines()
                if isinstance(value, (list, tuple)):
                    cleaned[name] = drop_blank([str(v) for v in value])
                elif value is not None:
                    issues.append(ValidationIssue(
                        field=name,
                        issue_type="invalid_list",
                        message=f"{_label(name)} must be a list of entries",
                        severity="error",
                        suggested_fix="Put one entry per line",
                    ))
                continue

            if _is_blank(value):
                if name in rules.zero_if_blank:
                    cleaned[name] = ZERO
                elif value is not None and info.annotation is str:
                    cleaned[name] = ""
                # Otherwise leave unset so the model default applies
                continue

            if name in rules.numeric:
                try:
                    cleaned[name] = Decimal(str(value).strip())
                except InvalidOperation:
                    issues.append(ValidationIssue(
                        field=name,
                        issue_type="invalid_number",
                        message=f"{_label(name)} must be a number",
                        severity="error",
                        suggested_fix="Use digits only, e.g. 1250.50",
                    ))
                    continue
                if not cleaned[name].is_finite():
                    del cleaned[name]
                    issues.append(ValidationIssue(
                        field=name,
                        issue_type="invalid_number",
                        message=f"{_label(name)} must be a finite number",
                        severity="error",
                    ))
                continue

            if name in rules.integer:
                try:
                    cleaned[name] = _to_whole_number(value)
                except (InvalidOperation, ValueError):
                    issues.append(ValidationIssue(
                        field=name,
                        issue_type="invalid_number",
                        message=f"{_label(name)} must be a whole number",
                        severity="error",
                    ))
                continue

            cleaned[name] = value.strip() if isinstance(value, str) else value

        return cleaned, issues

    def _validate_semantic(
        self,
        rules: FormRules,
        cleaned: dict[str, Any],
    ) -> list[ValidationIssue]:
        """Stage 2: let the record model check ranges, enums and dates."""
        try:
            rules.model.model_validate(cleaned)
        except ValidationError as e:
            # Error locations use aliases (camelCase); report field names
            by_alias = {
                info.alias or name: name
                for name, info in rules.model.model_fields.items()
            }
            issues = []
            for err in e.errors():
                loc = str(err["loc"][0]) if err["loc"] else "form"
                name = by_alias.get(loc, loc)
                issues.append(ValidationIssue(
                    field=name,
                    issue_type=err["type"],
                    message=f"{_label(name)}: {err['msg']}",
                    severity="error",
                ))
            return issues
        return []

    def validate_form(
        self,
        record_type: str,
        form: Mapping[str, Any],
    ) -> ValidationResult:
        """
        Run both stages for one form.

        Args:
            record_type: One of FORM_RULES (income_stream, investment,
                         goal, opportunity, family_member)
            form: Raw submitted values

        Returns:
            ValidationResult; `cleaned` is ready for the Create model
        """
        try:
            rules = FORM_RULES[record_type]
        except KeyError:
            raise ValueError(f"Unknown record type: {record_type}") from None

        cleaned, issues = self._validate_schema(rules, form)

        # Only run stage 2 if stage 1 passes
        if not any(issue.severity == "error" for issue in issues):
            issues.extend(self._validate_semantic(rules, cleaned))

        return ValidationResult(
            record_type=record_type,
            issues=issues,
            cleaned=cleaned,
        )

    def validate_invoice(self, invoice: Invoice) -> ValidationResult:
        """
        Pre-save checks for an invoice. Warnings only: an incomplete
        invoice can still be saved as a draft.
        """
        issues = []

        if not invoice.client_name:
            issues.append(ValidationIssue(
                field="client_name",
                issue_type="missing",
                message="Invoice has no client name",
                severity="warning",
            ))

        if not any(item.description for item in invoice.items):
            issues.append(ValidationIssue(
                field="items",
                issue_type="missing",
                message="No line item has a description",
                severity="warning",
                suggested_fix="Describe what is being billed",
            ))

        if invoice.due_date < invoice.issue_date:
            issues.append(ValidationIssue(
                field="due_date",
                issue_type="inconsistent",
                message="Due date is before invoice date",
                severity="warning",
            ))
        elif invoice.due_date > invoice.issue_date + timedelta(days=365):
            issues.append(ValidationIssue(
                field="due_date",
                issue_type="suspicious_date",
                message="Due date is more than a year after invoice date",
                severity="warning",
            ))

        if invoice.total == ZERO:
            issues.append(ValidationIssue(
                field="total",
                issue_type="suspicious_value",
                message="Invoice total is zero",
                severity="warning",
            ))

        return ValidationResult(record_type="invoice", issues=issues)

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
        headline: Optional[str] = None,
    ) -> str:
        """Short text block listing what to fix."""
        if not result.issues:
            return "All checks passed."

        lines = []
        errors = [i for i in result.issues if i.severity == "error"]
        warnings = [i for i in result.issues if i.severity == "warning"]

        if errors:
            lines.append(headline or "Please fill in all required fields")
            for issue in errors:
                lines.append(f"  - {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"    ({issue.suggested_fix})")

        if warnings:
            lines.append("Please verify the following:")
            for issue in warnings:
                lines.append(f"  - {issue.message}")

        return "\n".join(lines)
