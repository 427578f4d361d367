"""Payload codecs.

A codec turns the application's session payload into the bytes stored in
``Record.data`` and back.  Both shipped codecs validate through a pydantic
``TypeAdapter``, so any type pydantic understands (``BaseModel`` subclasses,
dataclasses, ``TypedDict``s, plain containers) can be used as a payload.

Classes
-------
- CodecError  — raised for any encode/decode failure
- Codec       — abstract base
- JSONCodec   — JSON via pydantic
- YAMLCodec   — YAML via PyYAML
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

import yaml
from pydantic import TypeAdapter, ValidationError

T = TypeVar("T")


class CodecError(ValueError):
    """Raised when a session payload cannot be encoded or decoded."""


class Codec(ABC, Generic[T]):
    """Encode and decode session payloads of type ``T``."""

    @abstractmethod
    def encode(self, session: T) -> bytes:
        """Return the serialized form of ``session``.

        Raises
        ------
        CodecError
            If ``session`` cannot be serialized.
        """

    @abstractmethod
    def decode(self, data: bytes) -> T:
        """Return the payload reconstructed from ``data``.

        Raises
        ------
        CodecError
            If ``data`` is malformed or does not validate as ``T``.
        """


class JSONCodec(Codec[T]):
    """JSON codec backed by a pydantic ``TypeAdapter``.

    Parameters
    ----------
    session_type:
        The payload type to validate decoded documents against.
    """

    def __init__(self, session_type: type[T]) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(session_type)

    def encode(self, session: T) -> bytes:
        try:
            return self._adapter.dump_json(session)
        except (ValueError, TypeError) as exc:
            raise CodecError(f"cannot encode session: {exc}") from exc

    def decode(self, data: bytes) -> T:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as exc:
            raise CodecError(f"cannot decode session: {exc}") from exc


class YAMLCodec(Codec[T]):
    """YAML codec; the payload is dumped to JSON-compatible data first."""

    def __init__(self, session_type: type[T]) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(session_type)

    def encode(self, session: T) -> bytes:
        try:
            plain: Any = self._adapter.dump_python(session, mode="json")
        except (ValueError, TypeError) as exc:
            raise CodecError(f"cannot encode session: {exc}") from exc
        text = yaml.safe_dump(plain, default_flow_style=False, allow_unicode=True, sort_keys=True)
        return text.encode("utf-8")

    def decode(self, data: bytes) -> T:
        try:
            plain = yaml.safe_load(data.decode("utf-8"))
            return self._adapter.validate_python(plain)
        except (yaml.YAMLError, UnicodeDecodeError, ValidationError) as exc:
            raise CodecError(f"cannot decode session: {exc}") from exc
