"""Write Rules — field checks that depend on the current year.

Invariants:
    - All functions are PURE: current_year is an argument, never read from a clock
    - Return FieldIssue on violation, None on success
    - collect_write_issues runs every check and returns ALL issues (not first-wins)

Design Decisions:
    - Model-year upper bound lives here rather than in the Pydantic schema: the
      schema is built once at import time, the bound moves every January
      (ADR: injected clock keeps the rule deterministic in tests)
"""

from vehicle_api.core.domain_types import MODEL_YEAR_LOOKAHEAD, MODEL_YEAR_MIN
from vehicle_api.core.errors import FieldIssue


def max_model_year(current_year: int) -> int:
    return current_year + MODEL_YEAR_LOOKAHEAD


def check_model_year(
    model_year: int, current_year: int, field: str = "modelYear",
) -> FieldIssue | None:
    """modelYear must fall in [1886, current_year + 2]."""
    upper = max_model_year(current_year)
    if not MODEL_YEAR_MIN <= model_year <= upper:
        return FieldIssue(
            field, f"must be between {MODEL_YEAR_MIN} and {upper}",
        )
    return None


def check_year_range_query(
    year: int | None, current_year: int, field: str = "yearMax",
) -> FieldIssue | None:
    """A yearMin/yearMax filter may not exceed current_year + 2."""
    if year is None:
        return None
    upper = max_model_year(current_year)
    if year > upper:
        return FieldIssue(field, f"must be less than or equal to {upper}")
    return None


def collect_write_issues(
    fields: dict, current_year: int,
) -> list[FieldIssue]:
    """Check a create/update payload (snake_case keys, only provided fields)."""
    issues = []
    model_year = fields.get("model_year")
    if model_year is not None:
        issue = check_model_year(model_year, current_year)
        if issue:
            issues.append(issue)
    return issues
