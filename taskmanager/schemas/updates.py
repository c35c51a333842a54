"""Allow-list checking for PATCH bodies."""
from typing import Any, Dict, Iterable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from taskmanager.errors import ValidationFailed, first_error_message

INVALID_UPDATE = "Invalid update properties!"

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_update(body: Dict[str, Any], allowed: Iterable[str], model: Type[ModelT]) -> ModelT:
    """
    Validate a partial update body.

    Raises:
        ValidationFailed: If any key is outside the allow-list, or a value fails validation
    """
    allowed = set(allowed)
    if not all(key in allowed for key in body):
        raise ValidationFailed(INVALID_UPDATE)
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise ValidationFailed(first_error_message(e.errors())) from e
