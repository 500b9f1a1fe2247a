"""Shared schema base.

The HTTP API speaks camelCase (``staffRating``, ``reviewCount``); Python code
keeps snake_case. Both spellings are accepted on input.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }
