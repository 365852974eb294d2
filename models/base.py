"""
Base schemas shared by all models.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class CamelSchema(BaseSchema):
    """
    Schema exchanged with the web frontend.

    Fields are snake_case in Python and camelCase on the wire; both
    spellings are accepted on input.
    """
    model_config = ConfigDict(
        **BaseSchema.model_config,
        alias_generator=to_camel,
        populate_by_name=True
    )
