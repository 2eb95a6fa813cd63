"""Typed values for remotely tunable parameters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

from services.feature_flags.errors import ParameterValueError

T = TypeVar("T")


class ParameterKind(str, Enum):
    STRING = "string"
    INT = "int"
    DOUBLE = "double"
    BOOL = "bool"
    STRING_LIST = "string_list"

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _matches(kind: ParameterKind, value: Any) -> bool:
    if kind is ParameterKind.STRING:
        return isinstance(value, str)
    if kind is ParameterKind.INT:
        return _is_int(value)
    if kind is ParameterKind.DOUBLE:
        return isinstance(value, float)
    if kind is ParameterKind.BOOL:
        return isinstance(value, bool)
    return isinstance(value, tuple) and all(isinstance(item, str) for item in value)


@dataclass(frozen=True, slots=True)
class ParameterValue:
    """A parameter value tagged with its kind.

    String lists are stored as tuples so values stay hashable and immutable.
    """

    kind: ParameterKind
    value: Any

    def __post_init__(self) -> None:
        kind = ParameterKind(self.kind)
        object.__setattr__(self, "kind", kind)
        if kind is ParameterKind.STRING_LIST and isinstance(self.value, list):
            object.__setattr__(self, "value", tuple(self.value))
        if not _matches(kind, self.value):
            raise ParameterValueError(f"Value {self.value!r} is not a valid '{kind.value}' parameter.")

    @classmethod
    def string(cls, value: str) -> "ParameterValue":
        return cls(ParameterKind.STRING, value)

    @classmethod
    def integer(cls, value: int) -> "ParameterValue":
        return cls(ParameterKind.INT, value)

    @classmethod
    def double(cls, value: float) -> "ParameterValue":
        if _is_int(value):
            value = float(value)
        return cls(ParameterKind.DOUBLE, value)

    @classmethod
    def boolean(cls, value: bool) -> "ParameterValue":
        return cls(ParameterKind.BOOL, value)

    @classmethod
    def string_list(cls, values: Sequence[str]) -> "ParameterValue":
        if isinstance(values, str):
            raise ParameterValueError("A string list must be a sequence of strings, not a string.")
        return cls(ParameterKind.STRING_LIST, tuple(values))

    @classmethod
    def from_json(cls, raw: Any, *, expected: Optional[ParameterKind] = None) -> "ParameterValue":
        """Infer a value from a decoded JSON scalar or list.

        JSON has a single number type, so an integral number is read as a
        double when ``expected`` says the parameter is a double, and a float
        with no fractional part is read as an int when it says int.
        """

        if isinstance(raw, bool):
            return cls.boolean(raw)
        if _is_int(raw):
            if expected is ParameterKind.DOUBLE:
                return cls.double(float(raw))
            return cls.integer(raw)
        if isinstance(raw, float):
            if expected is ParameterKind.INT and raw.is_integer():
                return cls.integer(int(raw))
            return cls.double(raw)
        if isinstance(raw, str):
            return cls.string(raw)
        if isinstance(raw, list) and all(isinstance(item, str) for item in raw):
            return cls.string_list(raw)
        raise ParameterValueError(f"Unsupported parameter value type: {type(raw).__name__}")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ParameterValue":
        """Decode the tagged ``{"kind", "value"}`` form used for persistence."""

        try:
            kind = ParameterKind(payload.get("kind"))
        except ValueError as exc:
            raise ParameterValueError(f"Unknown parameter kind: {payload.get('kind')!r}") from exc
        raw = payload.get("value")
        if kind is ParameterKind.DOUBLE and _is_int(raw):
            raw = float(raw)
        if kind is ParameterKind.STRING_LIST and isinstance(raw, list):
            raw = tuple(raw)
        return cls(kind, raw)

    def to_json(self) -> Any:
        if self.kind is ParameterKind.STRING_LIST:
            return list(self.value)
        return self.value

    def to_payload(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "value": self.to_json()}

    def as_type(self, requested: Type[T]) -> Optional[T]:
        """Return the raw value when it is of ``requested`` type, else ``None``."""

        if requested is bool:
            return self.value if self.kind is ParameterKind.BOOL else None
        if requested is int:
            return self.value if self.kind is ParameterKind.INT else None
        if requested is float:
            return self.value if self.kind is ParameterKind.DOUBLE else None
        if requested is str:
            return self.value if self.kind is ParameterKind.STRING else None
        if requested in (list, tuple):
            if self.kind is not ParameterKind.STRING_LIST:
                return None
            return requested(self.value)  # type: ignore[return-value]
        return None

    @property
    def string_value(self) -> Optional[str]:
        return self.as_type(str)

    @property
    def int_value(self) -> Optional[int]:
        return self.as_type(int)

    @property
    def double_value(self) -> Optional[float]:
        return self.as_type(float)

    @property
    def bool_value(self) -> Optional[bool]:
        return self.as_type(bool)

    @property
    def string_list_value(self) -> Optional[List[str]]:
        return self.as_type(list)

    @property
    def seconds(self) -> Optional[float]:
        """Numeric values read as a duration in seconds."""
        if self.kind in (ParameterKind.INT, ParameterKind.DOUBLE):
            return float(self.value)
        return None


__all__ = ["ParameterKind", "ParameterValue"]
