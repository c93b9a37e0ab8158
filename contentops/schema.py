from typing import Any, Dict, List

TITLE_MIN, TITLE_MAX = 5, 200
BODY_MIN, BODY_MAX = 50, 50000

TOPICS = ["mental-health", "substance-use", "wellness", "crisis"]
AUDIENCES = ["patients", "families", "professionals", "general"]
TONES = ["informative", "supportive", "clinical", "motivational"]

CHOICE_FIELDS = {
    "topic": TOPICS,
    "audience": AUDIENCES,
    "tone": TONES,
}


def _check_length(errors: List[str], data: Dict[str, Any], field: str, lo: int, hi: int) -> None:
    value = data.get(field)
    if field not in data:
        errors.append(f"Missing required field: {field}")
    elif not isinstance(value, str):
        errors.append(f"Field '{field}' must be a string")
    elif len(value) < lo:
        errors.append(f"Field '{field}' must be at least {lo} characters")
    elif len(value) > hi:
        errors.append(f"Field '{field}' must be less than {hi} characters")


def validate_content_form(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []

    _check_length(errors, data, "title", TITLE_MIN, TITLE_MAX)
    _check_length(errors, data, "body", BODY_MIN, BODY_MAX)

    for field, choices in CHOICE_FIELDS.items():
        if field not in data:
            errors.append(f"Missing required field: {field}")
        elif data[field] not in choices:
            errors.append(f"Invalid {field}: {data[field]!r} (expected one of {', '.join(choices)})")

    # Score is computed upstream; only its shape is checked here
    score = data.get("compliance_score")
    if score is not None:
        if isinstance(score, bool) or not isinstance(score, int):
            errors.append("Field 'compliance_score' must be an integer if provided")
        elif not 0 <= score <= 100:
            errors.append("Field 'compliance_score' must be between 0 and 100")

    return errors
