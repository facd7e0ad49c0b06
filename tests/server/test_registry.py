"""Tests for MethodRegistry and MethodHandler."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError

from batchrpc.server.registry import MethodHandler, MethodRegistry


class Item(BaseModel):
    sku: str
    qty: int = 1


class TestMethodHandler:
    def test_takes_params(self) -> None:
        assert MethodHandler("a", lambda p: p, params_type=int).takes_params
        assert not MethodHandler("b", lambda: None).takes_params

    def test_decode_validates(self) -> None:
        handler = MethodHandler("add", lambda p: p, params_type=list[int])
        assert handler.decode(["1", 2]) == [1, 2]
        with pytest.raises(ValidationError):
            handler.decode({"not": "a list"})

    def test_decode_gives_fresh_values(self) -> None:
        handler = MethodHandler("item", lambda p: p, params_type=Item)
        first = handler.decode({"sku": "x"})
        second = handler.decode({"sku": "x"})
        assert first == second
        assert first is not second

    def test_decode_without_params_type(self) -> None:
        assert MethodHandler("b", lambda: None).decode([1, 2]) is None

    async def test_invoke_sync(self) -> None:
        handler = MethodHandler("double", lambda p: p * 2, params_type=int)
        assert await handler.invoke(4) == 8

    async def test_invoke_async(self) -> None:
        async def fetch() -> str:
            return "done"

        assert await MethodHandler("fetch", fetch).invoke() == "done"

    def test_encode_with_result_type(self) -> None:
        handler = MethodHandler("item", lambda p: p, params_type=Item, result_type=Item)
        assert handler.encode(Item(sku="a", qty=2)) == {"sku": "a", "qty": 2}

    def test_encode_without_result_type(self) -> None:
        handler = MethodHandler("item", lambda: None)
        assert handler.encode(Item(sku="a")) == {"sku": "a", "qty": 1}
        assert handler.encode((1, 2)) == [1, 2]


class TestMethodRegistry:
    def test_register_and_get(self) -> None:
        registry = MethodRegistry()
        handler = registry.register("ping", lambda: "pong")
        assert registry.get("ping") is handler
        assert "ping" in registry
        assert registry.get("missing") is None

    def test_last_registration_wins(self) -> None:
        registry = MethodRegistry()
        registry.register("v", lambda: 1)
        second = registry.register("v", lambda: 2, result_type=int)
        assert len(registry) == 1
        assert registry.get("v") is second

    def test_names_sorted(self) -> None:
        registry = MethodRegistry()
        for name in ("b", "c", "a"):
            registry.register(name, lambda: None)
        assert registry.names() == ["a", "b", "c"]
