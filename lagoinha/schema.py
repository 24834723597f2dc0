from typing import Any, Dict, List, Sequence


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_payload(
    data: Any,
    required: Sequence[str],
    optional: Sequence[str] = (),
) -> List[str]:
    """
    Returns a list of validation error messages for a decoded service payload.
    Empty list means valid.
    """
    if not isinstance(data, dict):
        return [f"Expected an object, got {type(data).__name__}"]

    errors: List[str] = []

    for f in required:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    # Optional fields may be null or absent, but never another type
    for f in optional:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    return errors


def pick_fields(data: Dict[str, Any], fields: Sequence[str]) -> Dict[str, str]:
    """Return the named fields as strings, with missing or null values as ""."""
    return {f: data.get(f) or "" for f in fields}
