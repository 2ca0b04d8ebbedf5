"""Response body decoding."""

from __future__ import annotations

from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from .exceptions import ElasticDecodeError


ModelT = TypeVar("ModelT", bound=BaseModel)


class Decoder(Protocol):
    def decode(self, data: bytes, target: type[ModelT]) -> ModelT: ...


class DefaultDecoder:
    """Decode JSON bodies into pydantic models."""

    def decode(self, data: bytes, target: type[ModelT]) -> ModelT:
        if not data:
            raise ElasticDecodeError(f"empty response body, expected {target.__name__}")
        try:
            return target.model_validate_json(data)
        except ValidationError as exc:
            raise ElasticDecodeError(
                f"response body does not match {target.__name__}",
                body=data.decode("utf-8", errors="replace"),
                cause=exc,
            ) from exc
