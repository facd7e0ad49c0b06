"""Method registry — binds method names to typed handler strategies.

Each registration is stored as a :class:`MethodHandler` that knows how to
decode the wire params into the declared type, invoke the function, and
encode its result back into a JSON value. The dispatcher only talks to that
common interface and never inspects handler types itself.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python

HandlerFunction = Callable[..., Any]


@dataclass
class MethodHandler:
    """A registered method: ``decode`` → ``invoke`` → ``encode``."""

    name: str
    function: HandlerFunction
    params_type: Any = None
    result_type: Any = None
    _params_adapter: TypeAdapter[Any] | None = field(default=None, init=False, repr=False)
    _result_adapter: TypeAdapter[Any] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.params_type is not None:
            self._params_adapter = TypeAdapter(self.params_type)
        if self.result_type is not None:
            self._result_adapter = TypeAdapter(self.result_type)

    @property
    def takes_params(self) -> bool:
        return self._params_adapter is not None

    def decode(self, params: Any) -> Any:
        """Validate *params* into a fresh value of ``params_type``.

        Raises:
            pydantic.ValidationError: The params do not fit the declared type.
        """
        if self._params_adapter is None:
            return None
        return self._params_adapter.validate_python(params)

    async def invoke(self, value: Any = None) -> Any:
        """Call the function (awaiting it when it is a coroutine function)."""
        result = self.function(value) if self.takes_params else self.function()
        if inspect.isawaitable(result):
            result = await result
        return result

    def encode(self, result: Any) -> Any:
        """Turn the handler's return value into a JSON-compatible value."""
        if self._result_adapter is not None:
            return self._result_adapter.dump_python(result, mode="json", warnings="error")
        return to_jsonable_python(result)


class MethodRegistry:
    """Name → :class:`MethodHandler` mapping.

    Registering an existing name replaces the previous handler. Entries are
    never removed. Registration is expected to finish before serving starts.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, MethodHandler] = {}

    def register(
        self,
        name: str,
        function: HandlerFunction,
        params_type: Any = None,
        result_type: Any = None,
    ) -> MethodHandler:
        handler = MethodHandler(
            name=name,
            function=function,
            params_type=params_type,
            result_type=result_type,
        )
        self._handlers[name] = handler
        return handler

    def get(self, name: str) -> MethodHandler | None:
        return self._handlers.get(name)

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
