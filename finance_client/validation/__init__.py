"""Validation package."""

from finance_client.validation.validator import FormValidationError, FormValidator

__all__ = ["FormValidationError", "FormValidator"]
