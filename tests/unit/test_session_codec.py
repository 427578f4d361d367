"""Unit tests for httpsession.session.codec."""
from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel

from httpsession.session.codec import CodecError, JSONCodec, YAMLCodec


class Cart(BaseModel):
    user: str = ""
    items: list[str] = []


@dataclass
class Prefs:
    theme: str = "light"
    tags: list[str] = field(default_factory=list)


class TestJSONCodec:
    def test_model_roundtrip(self) -> None:
        codec = JSONCodec(Cart)
        cart = Cart(user="ana", items=["apple", "pear"])
        assert codec.decode(codec.encode(cart)) == cart

    def test_encodes_bytes(self) -> None:
        assert isinstance(JSONCodec(Cart).encode(Cart()), bytes)

    def test_dataclass_payload(self) -> None:
        codec = JSONCodec(Prefs)
        assert codec.decode(b'{"theme": "dark", "tags": ["x"]}') == Prefs("dark", ["x"])

    def test_dict_payload(self) -> None:
        codec = JSONCodec(dict[str, int])
        assert codec.decode(codec.encode({"n": 3})) == {"n": 3}

    def test_malformed_bytes(self) -> None:
        with pytest.raises(CodecError, match="cannot decode"):
            JSONCodec(Cart).decode(b"not json")

    def test_wrong_shape(self) -> None:
        with pytest.raises(CodecError):
            JSONCodec(Cart).decode(b'{"items": 5}')

    def test_unserialisable_value(self) -> None:
        codec = JSONCodec(dict[str, object])
        with pytest.raises(CodecError, match="cannot encode"):
            codec.encode({"handle": object()})


class TestYAMLCodec:
    def test_model_roundtrip(self) -> None:
        codec = YAMLCodec(Cart)
        cart = Cart(user="bo", items=["fig"])
        assert codec.decode(codec.encode(cart)) == cart

    def test_output_is_yaml(self) -> None:
        text = YAMLCodec(Cart).encode(Cart(user="bo")).decode("utf-8")
        assert "user: bo" in text

    def test_malformed_yaml(self) -> None:
        with pytest.raises(CodecError):
            YAMLCodec(Cart).decode(b"user: [unclosed")
