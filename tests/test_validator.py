"""
Tests for RecordValidator
"""

import pytest
from datetime import date
from decimal import Decimal

from homebooks.models.invoice import Invoice, InvoiceItem, new_invoice
from homebooks.models.wealth import (
    FamilyMemberCreate,
    GoalPriority,
    IncomeStreamCreate,
    InvestmentCreate,
    OpportunityCreate,
    WealthGoalCreate,
)
from homebooks.validation import RecordValidator


@pytest.fixture
def validator():
    return RecordValidator()


def issue_fields(result) -> set[str]:
    return {issue.field for issue in result.issues if issue.severity == "error"}


class TestRequiredFields:
    """Stage 1: required fields."""

    def test_income_stream_valid(self, validator):
        """Test a valid income stream form."""
        result = validator.validate_form("income_stream", {
            "name": "Salary",
            "monthlyAmount": "4200.50",
            "type": "job",
        })
        assert result.is_valid
        assert result.cleaned["monthly_amount"] == Decimal("4200.50")
        stream = IncomeStreamCreate.model_validate(result.cleaned)
        assert stream.name == "Salary"

    def test_income_stream_missing_amount(self, validator):
        """Test that a blank amount is missing."""
        result = validator.validate_form("income_stream", {"name": "Salary", "monthlyAmount": ""})
        assert not result.is_valid
        assert issue_fields(result) == {"monthly_amount"}

    def test_blank_name_is_missing(self, validator):
        """Test that a whitespace-only name is missing."""
        result = validator.validate_form("income_stream", {"name": "   ", "monthly_amount": "10"})
        assert issue_fields(result) == {"name"}

    def test_investment_requires_values(self, validator):
        """Test the required investment values."""
        result = validator.validate_form("investment", {"name": "ETF"})
        assert issue_fields(result) == {"current_value", "initial_investment"}

    def test_goal_requires_title_target_and_date(self, validator):
        """Test that an empty goal form reports all three fields."""
        result = validator.validate_form("goal", {})
        assert issue_fields(result) == {"title", "target_amount", "target_date"}
        assert result.error_count == 3

    def test_opportunity_requires_title_and_income(self, validator):
        """Test the required opportunity fields."""
        result = validator.validate_form("opportunity", {"title": "Shop"})
        assert issue_fields(result) == {"potential_income"}

    def test_family_member_requires_name(self, validator):
        """Test that a family member needs a name."""
        result = validator.validate_form("family_member", {"role": "Child"})
        assert issue_fields(result) == {"name"}

    def test_unknown_record_type(self, validator):
        """Test that an unknown record type raises."""
        with pytest.raises(ValueError):
            validator.validate_form("pet", {})


class TestValueParsing:
    """Stage 1: numbers and lists."""

    def test_optional_numbers_default_to_zero(self, validator):
        """Test that blank optional numbers become zero."""
        result = validator.validate_form("investment", {
            "name": "ETF",
            "currentValue": "1200",
            "initialInvestment": "1000",
            "monthlyContribution": "",
            "performancePercent": "",
        })
        assert result.is_valid
        assert result.cleaned["monthly_contribution"] == Decimal("0")
        assert result.cleaned["performance_percent"] == Decimal("0")
        InvestmentCreate.model_validate(result.cleaned)

    def test_goal_current_amount_defaults_to_zero(self, validator):
        """Test that a blank current amount becomes zero."""
        result = validator.validate_form("goal", {
            "title": "House",
            "targetAmount": "200000",
            "targetDate": "2030-01-01",
            "currentAmount": "",
            "priority": "high",
        })
        assert result.is_valid
        goal = WealthGoalCreate.model_validate(result.cleaned)
        assert goal.current_amount == Decimal("0")
        assert goal.target_date == date(2030, 1, 1)
        assert goal.priority == GoalPriority.HIGH

    def test_non_numeric_amount(self, validator):
        """Test that text in a number field is reported."""
        result = validator.validate_form("income_stream", {"name": "Salary", "monthlyAmount": "lots"})
        assert not result.is_valid
        assert result.issues[0].issue_type == "invalid_number"
        assert result.issues[0].suggested_fix

    def test_non_finite_amount(self, validator):
        """Test that NaN is not accepted as an amount."""
        result = validator.validate_form("income_stream", {"name": "Salary", "monthlyAmount": "NaN"})
        assert not result.is_valid
        assert "monthly_amount" not in result.cleaned

    def test_list_fields_split_and_cleaned(self, validator):
        """Test that list fields are split on lines and cleaned."""
        result = validator.validate_form("opportunity", {
            "title": "Tutoring",
            "potentialIncome": "600",
            "pros": "Flexible\n\n  Pays well  \n",
            "cons": ["", "Evenings"],
        })
        assert result.is_valid
        assert result.cleaned["pros"] == ["Flexible", "Pays well"]
        assert result.cleaned["cons"] == ["Evenings"]
        OpportunityCreate.model_validate(result.cleaned)

    def test_age_must_be_whole_number(self, validator):
        """Test that a non-numeric age is reported."""
        result = validator.validate_form("family_member", {"name": "Sam", "age": "twelve"})
        assert issue_fields(result) == {"age"}

    @pytest.mark.parametrize("age", ["30.0", 30.0, Decimal("30.00"), " 30 "])
    def test_integral_age_accepted(self, validator, age):
        """Test that whole numbers written with a decimal point are accepted."""
        result = validator.validate_form("family_member", {"name": "Sam", "age": age})
        assert result.is_valid
        assert result.cleaned["age"] == 30

    def test_fractional_age_rejected(self, validator):
        """Test that a fractional age is reported as a number issue."""
        result = validator.validate_form("family_member", {"name": "Sam", "age": "12.5"})
        assert issue_fields(result) == {"age"}
        assert result.issues[0].issue_type == "invalid_number"

    def test_scalar_list_field_reported(self, validator):
        """Test that a number given for a list field is an issue, not an exception."""
        result = validator.validate_form("opportunity", {
            "title": "Tutoring",
            "potentialIncome": "600",
            "pros": 5,
        })
        assert not result.is_valid
        assert issue_fields(result) == {"pros"}
        assert result.issues[0].issue_type == "invalid_list"
        assert "pros" not in result.cleaned

    def test_family_member_skills(self, validator):
        """Test family member age and skills parsing."""
        result = validator.validate_form("family_member", {
            "name": "Sam",
            "age": "12",
            "skills": "Drawing\n",
        })
        member = FamilyMemberCreate.model_validate(result.cleaned)
        assert member.age == 12
        assert member.skills == ["Drawing"]


class TestRecordChecks:
    """Stage 2: model-level checks."""

    def test_goal_target_must_be_positive(self, validator):
        """Test that a zero target is reported."""
        result = validator.validate_form("goal", {
            "title": "House",
            "targetAmount": "0",
            "targetDate": "2030-01-01",
        })
        assert not result.is_valid
        assert issue_fields(result) == {"target_amount"}

    def test_negative_amount_rejected(self, validator):
        """Test that negative amounts are reported."""
        result = validator.validate_form("income_stream", {"name": "Salary", "monthlyAmount": "-5"})
        assert issue_fields(result) == {"monthly_amount"}

    def test_bad_enum_value(self, validator):
        """Test that an unknown choice is reported."""
        result = validator.validate_form("opportunity", {
            "title": "Shop",
            "potentialIncome": "100",
            "riskLevel": "extreme",
        })
        assert issue_fields(result) == {"risk_level"}

    def test_bad_date(self, validator):
        """Test that an unparseable date is reported."""
        result = validator.validate_form("goal", {
            "title": "House",
            "targetAmount": "100",
            "targetDate": "someday",
        })
        assert issue_fields(result) == {"target_date"}

    def test_stage_two_skipped_when_stage_one_fails(self, validator):
        """Test that record checks wait for the required fields."""
        result = validator.validate_form("goal", {
            "title": "",
            "targetAmount": "0",
            "targetDate": "2030-01-01",
        })
        assert issue_fields(result) == {"title"}


class TestInvoiceChecks:
    """Invoice checks are warnings only."""

    def test_blank_draft_gets_warnings_but_is_valid(self, validator):
        """Test that a blank draft is savable with warnings."""
        result = validator.validate_invoice(new_invoice())
        assert result.is_valid
        fields = {issue.field for issue in result.issues}
        assert fields == {"client_name", "items", "total"}
        assert all(issue.severity == "warning" for issue in result.issues)

    def test_complete_invoice_has_no_issues(self, validator):
        """Test that a complete invoice has no issues."""
        invoice = Invoice(
            invoice_number="INV-1",
            issue_date=date(2026, 3, 1),
            due_date=date(2026, 3, 31),
            client_name="Acme",
            items=[InvoiceItem(description="Design", quantity=1, rate=100)],
        )
        assert validator.validate_invoice(invoice).issues == []

    def test_due_before_issue_date(self, validator):
        """Test the due date ordering warning."""
        invoice = Invoice(
            invoice_number="INV-1",
            issue_date=date(2026, 3, 1),
            due_date=date(2026, 2, 1),
            client_name="Acme",
            items=[InvoiceItem(description="Design", quantity=1, rate=100)],
        )
        result = validator.validate_invoice(invoice)
        assert [issue.issue_type for issue in result.issues] == ["inconsistent"]


class TestSummary:
    """Tests for the user-facing summary."""

    def test_summary_lists_errors(self, validator):
        """Test the summary text for errors."""
        result = validator.validate_form("goal", {"title": "House"})
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("Please fill in all required fields")
        assert "Target amount is required" in summary

    def test_summary_when_clean(self, validator):
        """Test the summary text when nothing is wrong."""
        result = validator.validate_form("family_member", {"name": "Sam"})
        assert validator.get_user_friendly_summary(result) == "All checks passed."
