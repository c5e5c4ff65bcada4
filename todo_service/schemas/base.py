"""
Todo Service - Wire Model Base
===============================

What:  Shared Pydantic configuration for every record that crosses the wire.
How:   camelCase aliases on the wire, snake_case attributes in Python,
       strict typing and no unknown fields.

Strictness:
    The codec promises that a field of the wrong type is a DecodeError.
    Pydantic's default lax mode would coerce "true" and 1 into True;
    strict mode rejects both. JSON strings are still accepted for
    datetime fields because JSON has no native timestamp.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base class for Todo, OAuthToken, OAuthError and request bodies."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        extra="forbid",
        frozen=True,
    )
