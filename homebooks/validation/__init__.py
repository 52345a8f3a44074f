"""Form validation package."""

from homebooks.validation.validator import FORM_RULES, FormRules, RecordValidator

__all__ = ["FORM_RULES", "FormRules", "RecordValidator"]
