"""Required-parameter check for extracted tool calls."""
from typing import Any, Mapping

from ..models import Invalid, ToolDescriptor, Valid, ValidationOutcome


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def validate_params(tool: ToolDescriptor, params: Mapping[str, Any]) -> ValidationOutcome:
    """Report every missing required param, in the order the tool declares them."""
    missing = tuple(name for name in tool.required_params if not is_present(params.get(name)))
    if missing:
        return Invalid(missing=missing)
    return Valid()
