"""
Identity validation rules.

Kept as plain functions so each rule is visible and testable on its own.
Profile rules are dispatched on role: customer accounts must carry a billing
address and company country, administrator accounts may omit them.
"""

import re
from typing import Callable, Dict, Mapping, Optional

from .entities.enums import UserRole

PASSWORD_MIN_LENGTH = 8
# bcrypt only accepts this many bytes of input
PASSWORD_MAX_BYTES = 72
PASSWORD_SYMBOLS = "@$!%*?&#^()_+-=[]{};:,.<>/\\|~"

SUPPORTED_COUNTRIES = {
    "PL": {"name": "Poland", "tax_id": re.compile(r"^\d{10}$"), "postal_code": re.compile(r"^\d{2}-\d{3}$"), "postal_format": "NN-NNN"},
    "DE": {"name": "Germany", "tax_id": re.compile(r"^\d{9}$"), "postal_code": re.compile(r"^\d{5}$"), "postal_format": "NNNNN"},
    "CZ": {"name": "Czechia", "tax_id": re.compile(r"^\d{8}$"), "postal_code": re.compile(r"^\d{3}\s?\d{2}$"), "postal_format": "NNN NN"},
}

PHONE_PATTERN = re.compile(r"^\+?[0-9\s-]{9,15}$")

ADDRESS_FIELDS = ("company_country", "street", "postal_code", "city")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def password_policy_violations(password: str) -> list:
    """Return the list of unmet password requirements (empty when strong)."""
    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"at least {PASSWORD_MIN_LENGTH} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        problems.append(f"at most {PASSWORD_MAX_BYTES} bytes")
    if not any(c.islower() for c in password):
        problems.append("a lowercase letter")
    if not any(c.isupper() for c in password):
        problems.append("an uppercase letter")
    if not any(c.isdigit() for c in password):
        problems.append("a digit")
    if not any(c in PASSWORD_SYMBOLS for c in password):
        problems.append("a special character")
    return problems


def is_strong_password(password: str) -> bool:
    return not password_policy_violations(password)


def _validate_common(profile: Mapping[str, Optional[str]]) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    for name_field in ("first_name", "last_name"):
        value = (profile.get(name_field) or "").strip()
        if not value:
            errors[name_field] = "This field is required"
        elif not 2 <= len(value) <= 50:
            errors[name_field] = "Must be between 2 and 50 characters"

    phone = profile.get("phone")
    if phone and not PHONE_PATTERN.match(phone):
        errors["phone"] = "Invalid phone number format"

    company_name = profile.get("company_name")
    if company_name and len(company_name) > 100:
        errors["company_name"] = "Must be at most 100 characters"

    country = profile.get("company_country")
    if country:
        country_rules = SUPPORTED_COUNTRIES.get(country)
        if country_rules is None:
            errors["company_country"] = "Unsupported country"
        else:
            tax_id = profile.get("tax_id")
            if tax_id and not country_rules["tax_id"].match(tax_id):
                errors["tax_id"] = f"Invalid tax id format for {country}"
            postal_code = profile.get("postal_code")
            if postal_code and not country_rules["postal_code"].match(postal_code):
                errors["postal_code"] = (
                    f"Invalid postal code for {country} (format: {country_rules['postal_format']})"
                )
    return errors


def _validate_customer(profile: Mapping[str, Optional[str]]) -> Dict[str, str]:
    errors = _validate_common(profile)
    for field in ADDRESS_FIELDS:
        if not profile.get(field) and field not in errors:
            errors[field] = "This field is required"
    if profile.get("company_name") and not profile.get("tax_id") and "tax_id" not in errors:
        errors["tax_id"] = "Tax id is required for company accounts"
    return errors


def _validate_admin(profile: Mapping[str, Optional[str]]) -> Dict[str, str]:
    return _validate_common(profile)


PROFILE_VALIDATORS: Dict[UserRole, Callable[[Mapping[str, Optional[str]]], Dict[str, str]]] = {
    UserRole.user: _validate_customer,
    UserRole.admin: _validate_admin,
}


def validate_profile(role: UserRole, profile: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """Field-level errors for a profile under the rules of the given role."""
    return PROFILE_VALIDATORS[UserRole(role)](profile)
