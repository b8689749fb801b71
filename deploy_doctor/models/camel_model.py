"""
Camel Model
===========
Base for every model that crosses the JSON boundary.

Python attributes stay snake_case; serialized output (and accepted input)
uses camelCase field names, e.g. ``has_errors`` <-> ``hasErrors``.
Dump with ``model_dump(by_alias=True)`` to get the wire shape.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
