"""
Base schema for JSON payloads exchanged with the web frontend.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Schema whose JSON keys are camelCase (``createdAt``, ``propertyType``).
    Python code uses the snake_case attribute names; input accepts either form.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
