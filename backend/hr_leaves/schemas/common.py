from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Payload(BaseModel):
    """Base for request bodies: snake_case fields, camelCase accepted as aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
