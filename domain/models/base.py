"""
Shared pydantic configuration for parser models.

Reasoning-service replies and API payloads use camelCase keys
("exerciseName", "setNumber"), while Python code uses snake_case attributes.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
