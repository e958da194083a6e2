"""Typed query parameters.

A :class:`Parameter` fixes the storage kind of a bound value at the call
site. Raw Python values handed to ``Database.query`` are converted once
with :meth:`Parameter.infer`:

    ========  ===========  ================================
    value     kind         bound as
    ========  ===========  ================================
    float     TEXT         ``str(value)`` (``12.3`` → ``"12.3"``)
    bool      BOOLEAN      ``True`` / ``False``
    int       INTEGER      ``int(value)``
    None      NULL         ``None``
    other     TEXT         ``str(value)``
    ========  ===========  ================================

Floats are bound as text so that no adapter rounds them through a native
binary floating type.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ParameterKind(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"


@dataclass(frozen=True)
class Parameter:
    """A value paired with the storage kind it is bound as."""

    kind: ParameterKind
    value: Any = None

    @classmethod
    def text(cls, value: Any) -> Parameter:
        return cls(ParameterKind.TEXT, value)

    @classmethod
    def integer(cls, value: int) -> Parameter:
        return cls(ParameterKind.INTEGER, value)

    @classmethod
    def boolean(cls, value: bool) -> Parameter:
        return cls(ParameterKind.BOOLEAN, value)

    @classmethod
    def null(cls) -> Parameter:
        return cls(ParameterKind.NULL)

    @classmethod
    def infer(cls, value: Any) -> Parameter:
        """Pick the storage kind from the runtime type of *value*."""
        if isinstance(value, Parameter):
            return value
        if isinstance(value, float):
            return cls.text(value)
        # bool before int: bool is a subclass of int
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, int):
            return cls.integer(value)
        if value is None:
            return cls.null()
        return cls.text(value)

    def bind_value(self) -> Any:
        """The value handed to the DB-API driver."""
        match self.kind:
            case ParameterKind.TEXT:
                return self.value if isinstance(self.value, (str, bytes)) else str(self.value)
            case ParameterKind.INTEGER:
                return int(self.value)
            case ParameterKind.BOOLEAN:
                return bool(self.value)
            case ParameterKind.NULL:
                return None


def bind_parameters(
    parameters: Sequence[Any] | Mapping[str, Any] | None,
) -> tuple[Any, ...] | dict[str, Any]:
    """Convert positional or named parameters into driver-ready values."""
    if parameters is None:
        return ()
    if isinstance(parameters, (str, bytes)):
        raise TypeError("parameters must be a sequence or a mapping, not a string")
    if isinstance(parameters, Mapping):
        return {name: Parameter.infer(value).bind_value() for name, value in parameters.items()}
    return tuple(Parameter.infer(value).bind_value() for value in parameters)


__all__ = [
    "ParameterKind",
    "Parameter",
    "bind_parameters",
]
