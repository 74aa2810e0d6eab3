"""
Model validation utilities for contentcore.

Content, languages and content groups are pydantic models whose field
constraints (required, max length) act as the declarative validation rules.
Defaults are not validated on construction, so an empty model can be
created and filled in; ``validate_model`` then re-validates every value
before anything is persisted.

Usage:
    from contentcore.utils.validators import validate_model, ContentValidationError

    try:
        validate_model(model)
    except ContentValidationError as e:
        return {"error": str(e), "field": e.field}
"""

from typing import Optional

from pydantic import BaseModel, ValidationError


class ContentValidationError(ValueError):
    """
    Raised when a model violates a declarative constraint.

    Attributes:
        field: Dotted path of the offending field, if known
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def validate_model(model: BaseModel) -> None:
    """
    Validate all values of a model against its declared constraints.

    Args:
        model: The pydantic model to validate

    Raises:
        ContentValidationError: For the first violated constraint
    """
    try:
        # Dump first so nested models (categories, regions of static types) are checked too
        type(model).model_validate(model.model_dump())
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or None
        message = f"{field}: {error['msg']}" if field else error["msg"]
        raise ContentValidationError(message, field=field) from e
