import math
from typing import Any

from jobmarket.errors import ValidationError

CATEGORIES = ("Domestic", "Retail", "Farm", "Catering", "Trade")
SALARY_PERIODS = ("weekly", "monthly")
USER_TYPES = ("jobseeker", "employer")
JOB_STATUSES = ("active", "closed")

# field -> (minimum trimmed length, message)
_JOB_TEXT_RULES = {
    "title": (3, "Job title must be at least 3 characters"),
    "description": (20, "Job description must be at least 20 characters"),
    "location": (2, "Please enter a valid location"),
}

_CONTACT_RULES = {
    "name": (2, "Please enter your full name"),
    "phone": (8, "Please enter a valid phone number"),
}

_APPLICATION_RULES = {
    **_CONTACT_RULES,
    "motivation": (20, "Please write at least 20 characters explaining why you're a good fit"),
}

_SIGNUP_RULES = {
    **_CONTACT_RULES,
    "password": (6, "Password must be at least 6 characters"),
    "location": (2, "Please enter a valid location"),
}


def _require_min_length(fields: dict[str, Any], rules: dict[str, tuple[int, str]]):
    for field, (minimum, message) in rules.items():
        value = fields.get(field)
        if not isinstance(value, str) or len(value.strip()) < minimum:
            raise ValidationError(field, message)


def _require_email(fields: dict[str, Any]):
    email = fields.get("email")
    if not isinstance(email, str) or "@" not in email:
        raise ValidationError("email", "Please enter a valid email address")


def _require_choice(fields: dict[str, Any], field: str, choices: tuple[str, ...]):
    if fields.get(field) not in choices:
        raise ValidationError(field, f"Invalid {field}. Must be one of: {', '.join(choices)}")


def validate_signup(fields: dict[str, Any]):
    _require_email(fields)
    _require_min_length(fields, _SIGNUP_RULES)
    _require_choice(fields, "userType", USER_TYPES)


def validate_job(fields: dict[str, Any]):
    """Checks a complete job record; updates are validated after merging."""
    _require_min_length(fields, _JOB_TEXT_RULES)

    salary = fields.get("salary")
    try:
        amount = float(salary)
    except (TypeError, ValueError):
        raise ValidationError("salary", "Please enter a valid salary") from None
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("salary", "Please enter a valid salary")

    _require_choice(fields, "category", CATEGORIES)
    _require_choice(fields, "salaryPeriod", SALARY_PERIODS)

    requirements = fields.get("requirements", [])
    if not isinstance(requirements, list) or not all(isinstance(r, str) for r in requirements):
        raise ValidationError("requirements", "Requirements must be a list of strings")


def validate_application(fields: dict[str, Any]):
    _require_email(fields)
    _require_min_length(fields, _APPLICATION_RULES)


def validate_feedback(fields: dict[str, Any]):
    rating = fields.get("rating")
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("rating", "Rating must be a whole number from 1 to 5")
    message = fields.get("message")
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("message", "Please enter your feedback")
