"""
Todo Service - JSON Codec
==========================

What:  Bidirectional mapping between wire records (Todo, OAuthToken,
       OAuthError, request bodies) and JSON text.
How:   Pydantic's JSON mode does the work; this module fixes the options
       (aliases on, strict models) and translates pydantic's
       ValidationError into our DecodeError.
Who:   Route handlers decode request bodies and encode responses through
       here; tests use it for round-trip checks.

Guarantee:
    decode(type(x), encode(x)) == x for every valid record x.
"""

import logging
from typing import Any, Dict, List, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from todo_service.exceptions import DecodeError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

JSONText = Union[str, bytes]


def encode(value: Union[BaseModel, Sequence[BaseModel]]) -> str:
    """
    Serialize a record, or a sequence of records, to JSON text.

    Field names use their wire aliases (clientId, issuedAt, ...).
    """
    if isinstance(value, BaseModel):
        return value.model_dump_json(by_alias=True)
    return "[" + ",".join(item.model_dump_json(by_alias=True) for item in value) + "]"


def decode(model_cls: Type[ModelT], text: JSONText) -> ModelT:
    """
    Parse JSON text into an instance of `model_cls`.

    Raises:
        DecodeError: empty body, invalid JSON, missing required fields,
            wrong field types or unknown fields.
    """
    if not text or not text.strip():
        raise DecodeError(message="Request body is empty")
    try:
        return model_cls.model_validate_json(text)
    except PydanticValidationError as exc:
        raise _to_decode_error(exc, model_cls.__name__) from exc


def _to_decode_error(exc: PydanticValidationError, target: str) -> DecodeError:
    # Input values are dropped: they may contain secrets (clientSecret)
    errors: List[Dict[str, Any]] = exc.errors(include_url=False, include_input=False)
    summary = "; ".join(_describe(error) for error in errors[:3])
    logger.debug("Could not decode %s: %s", target, summary)
    return DecodeError(
        message=f"Invalid {target}: {summary}",
        errors=[{"loc": list(e["loc"]), "type": e["type"], "msg": e["msg"]} for e in errors],
    )


def _describe(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error["loc"]) or "body"
    return f"{location}: {error['msg']}"
