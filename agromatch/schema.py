from typing import Any, Dict, List

from .normalize import EXPERIENCE_LEVELS, normalize_experience

COMPANY_SIZES = ["small", "medium", "large"]
JOB_STATUSES = ["open", "closed"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_str_list(v: Any) -> bool:
    return isinstance(v, list) and all(isinstance(x, str) for x in v)


def _check_required(data: Dict[str, Any], fields: List[str], errors: List[str]) -> None:
    for f in fields:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")


def _check_optional_str(data: Dict[str, Any], fields: List[str], errors: List[str]) -> None:
    for f in fields:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")


def _check_str_list(data: Dict[str, Any], fields: List[str], errors: List[str]) -> None:
    for f in fields:
        if data.get(f) is not None and not _is_str_list(data[f]):
            errors.append(f"Field '{f}' must be a list of strings")


def _check_experience(data: Dict[str, Any], field: str, errors: List[str]) -> None:
    value = data.get(field)
    if isinstance(value, str) and value.strip() and normalize_experience(value) is None:
        errors.append(f"Field '{field}' must be one of: {', '.join(EXPERIENCE_LEVELS)}")


def validate_candidate(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []
    _check_required(data, ["id"], errors)
    _check_optional_str(data, ["name", "experience_level", "preferred_location"], errors)
    _check_str_list(data, ["skills", "languages"], errors)
    _check_experience(data, "experience_level", errors)
    return errors


def validate_job(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    _check_required(data, ["id", "title"], errors)
    _check_optional_str(
        data,
        ["min_experience", "location", "contract_type", "language_requirement", "category", "status", "company_id"],
        errors,
    )
    _check_str_list(data, ["required_skills"], errors)
    _check_experience(data, "min_experience", errors)
    status = data.get("status")
    if isinstance(status, str) and status.strip().lower() not in JOB_STATUSES:
        errors.append(f"Field 'status' must be one of: {', '.join(JOB_STATUSES)}")
    return errors


def validate_company(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    _check_required(data, ["id", "name"], errors)
    _check_optional_str(data, ["industry", "size"], errors)

    size = data.get("size")
    if isinstance(size, str) and size.strip().lower() not in COMPANY_SIZES:
        errors.append(f"Field 'size' must be one of: {', '.join(COMPANY_SIZES)}")

    for f in ["revenue", "email_response_hours"]:
        v = data.get(f)
        if v is not None and (isinstance(v, bool) or not isinstance(v, (int, float)) or v < 0):
            errors.append(f"Field '{f}' must be a non-negative number if provided")

    v = data.get("open_positions")
    if v is not None and (isinstance(v, bool) or not isinstance(v, int) or v < 0):
        errors.append("Field 'open_positions' must be a non-negative integer if provided")

    for f in ["offers_relocation", "provides_housing", "helps_with_visa", "transport_support", "language_training"]:
        if f in data and not isinstance(data[f], bool):
            errors.append(f"Field '{f}' must be a boolean if provided")
    return errors


VALIDATORS = {
    "candidate": validate_candidate,
    "job": validate_job,
    "company": validate_company,
}
