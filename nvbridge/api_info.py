"""Parsing of the metadata returned by ``nvim_get_api_info``."""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

log = logging.getLogger(__name__)

_U64_MAX = 2**64 - 1
_SIZE = re.compile(r"\+?[0-9]+")


class ApiInfoParseError(ValueError):
    """Raised when the API metadata does not have the expected shape."""


def _u64(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U64_MAX:
        raise ApiInfoParseError(repr(value))
    return value


def _bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ApiInfoParseError(repr(value))
    return value


def _string(value: Any) -> str:
    if not isinstance(value, str):
        raise ApiInfoParseError(repr(value))
    return value


def _array(value: Any) -> list:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ApiInfoParseError(repr(value))
    return list(value)


def _map(value: Any) -> list[tuple[str, Any]]:
    """Return the entries of a map, accepting a dict or a list of pairs."""
    if isinstance(value, Mapping):
        pairs = list(value.items())
    else:
        pairs = []
        for entry in _array(value):
            entry = _array(entry)
            if len(entry) != 2:
                raise ApiInfoParseError(repr(value))
            pairs.append((entry[0], entry[1]))
    return [(_string(key), item) for key, item in pairs]


@dataclass(frozen=True)
class ApiVersion:
    major: int
    minor: int
    patch: int
    prerelease: bool
    api_level: int
    api_compatible: int
    api_prerelease: bool

    def has_version(self, major: int, minor: int, patch: int) -> bool:
        """Whether this version is at least ``major.minor.patch``."""
        log.debug("actual nvim version: %d.%d.%d", self.major, self.minor, self.patch)
        log.debug("expect nvim version: %d.%d.%d", major, minor, patch)
        result = (self.major, self.minor, self.patch) >= (major, minor, patch)
        log.debug("has desired nvim version: %s", result)
        return result


class ApiTypeKind(enum.Enum):
    NIL = "Nil"
    BOOLEAN = "Boolean"
    INTEGER = "Integer"
    FLOAT = "Float"
    STRING = "String"
    ARRAY = "Array"
    DICTIONARY = "Dictionary"
    OBJECT = "Object"
    BUFFER = "Buffer"
    WINDOW = "Window"
    TABPAGE = "Tabpage"
    ARRAY_OF = "ArrayOf"
    SIZED_ARRAY_OF = "SizedArrayOf"
    LUA_REF = "LuaRef"
    VOID = "void"
    UNKNOWN = "Unknown"


_SIMPLE_KINDS = {
    kind.value: kind
    for kind in ApiTypeKind
    if kind not in (ApiTypeKind.ARRAY_OF, ApiTypeKind.SIZED_ARRAY_OF, ApiTypeKind.UNKNOWN)
}


@dataclass(frozen=True)
class ApiParameterType:
    """A type from the API metadata; arrays carry their element type."""

    kind: ApiTypeKind
    element: ApiParameterType | None = None
    size: int | None = None
    name: str | None = None

    @classmethod
    def from_name(cls, name: str | None) -> ApiParameterType:
        if name is None:
            return cls(ApiTypeKind.UNKNOWN, name="")
        simple = _SIMPLE_KINDS.get(name)
        if simple is not None:
            return cls(simple)
        if name.startswith("ArrayOf("):
            inner = name[len("ArrayOf("):]
            if not inner.endswith(")"):
                raise ApiInfoParseError(f"Invalid array type {name}")
            parts = inner[:-1].split(",")
            element = cls.from_name(parts[0].strip())
            if len(parts) > 1:
                size_text = parts[1].strip()
                size = int(size_text) if _SIZE.fullmatch(size_text) else 0
                return cls(ApiTypeKind.SIZED_ARRAY_OF, element=element, size=size)
            return cls(ApiTypeKind.ARRAY_OF, element=element)
        return cls(ApiTypeKind.UNKNOWN, name=name)


@dataclass(frozen=True)
class ApiParameter:
    name: str
    parameter_type: ApiParameterType


@dataclass(eq=False)
class ApiFunction:
    """An API function; functions are equal when their names are."""

    name: str
    parameters: list[ApiParameter]
    since: int
    return_type: ApiParameterType | None = None
    method: bool | None = None
    deprecated_since: int | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApiFunction):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)


@dataclass(eq=False)
class ApiEvent:
    """A UI event; events are equal when their names are."""

    name: str
    parameters: list[ApiParameter]
    since: int

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApiEvent):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)


@dataclass
class ApiInformation:
    channel: int
    version: ApiVersion
    functions: set[ApiFunction] = field(default_factory=set)
    ui_options: list[str] = field(default_factory=list)
    ui_events: set[ApiEvent] = field(default_factory=set)

    def has_event(self, event_name: str) -> bool:
        return any(event.name == event_name for event in self.ui_events)


def _require(fields: dict[str, Any], name: str) -> Any:
    if name not in fields:
        raise ApiInfoParseError(f"{name} field is missing")
    return fields[name]


def _parse_version(value: Any) -> ApiVersion:
    fields: dict[str, Any] = {}
    converters = {
        "major": _u64,
        "minor": _u64,
        "patch": _u64,
        "prerelease": _bool,
        "api_level": _u64,
        "api_compatible": _u64,
        # Some Neovim releases send nil here; treat that as a release.
        "api_prerelease": lambda v: v is not None and _bool(v),
    }
    for key, item in _map(value):
        converter = converters.get(key)
        if converter is not None:
            fields[key] = converter(item)
    return ApiVersion(**{name: _require(fields, name) for name in converters})


def _parse_parameter_type(value: Any) -> ApiParameterType:
    return ApiParameterType.from_name(_string(value))


def _parse_parameter(value: Any) -> ApiParameter:
    info = _array(value)
    if len(info) != 2:
        raise ApiInfoParseError("Invalid parameter")
    type_value, name_value = info
    name = _string(name_value)
    return ApiParameter(name=name, parameter_type=_parse_parameter_type(type_value))


def _parse_parameters(value: Any) -> list[ApiParameter]:
    return [_parse_parameter(item) for item in _array(value)]


def _parse_function(value: Any) -> ApiFunction:
    converters = {
        "name": _string,
        "parameters": _parse_parameters,
        "return_type": _parse_parameter_type,
        "method": _bool,
        "since": _u64,
        "deprecated_since": _u64,
    }
    fields: dict[str, Any] = {}
    for key, item in _map(value):
        converter = converters.get(key)
        if converter is None:
            raise ApiInfoParseError(key)
        fields[key] = converter(item)
    return ApiFunction(
        name=_require(fields, "name"),
        parameters=_require(fields, "parameters"),
        since=_require(fields, "since"),
        return_type=fields.get("return_type"),
        method=fields.get("method"),
        deprecated_since=fields.get("deprecated_since"),
    )


def _parse_ui_event(value: Any) -> ApiEvent:
    converters = {"name": _string, "parameters": _parse_parameters, "since": _u64}
    fields: dict[str, Any] = {}
    for key, item in _map(value):
        converter = converters.get(key)
        if converter is None:
            raise ApiInfoParseError(key)
        fields[key] = converter(item)
    return ApiEvent(
        name=_require(fields, "name"),
        parameters=_require(fields, "parameters"),
        since=_require(fields, "since"),
    )


def _collect_set(items: list) -> set:
    result: set = set()
    for item in items:
        if item not in result:
            result.add(item)
    return result


def parse_api_info(value: Sequence[Any]) -> ApiInformation:
    """Parse the ``[channel, metadata]`` pair returned by ``nvim_get_api_info``."""
    if len(value) < 2:
        raise ApiInfoParseError(repr(value))
    channel = _u64(value[0])

    parsers = {
        "version": _parse_version,
        "functions": lambda v: _collect_set([_parse_function(f) for f in _array(v)]),
        "ui_options": lambda v: [_string(o) for o in _array(v)],
        "ui_events": lambda v: _collect_set([_parse_ui_event(e) for e in _array(v)]),
    }
    fields: dict[str, Any] = {}
    for key, item in _map(value[1]):
        parser = parsers.get(key)
        if parser is not None:
            fields[key] = parser(item)

    return ApiInformation(
        channel=channel,
        version=_require(fields, "version"),
        functions=_require(fields, "functions"),
        ui_options=_require(fields, "ui_options"),
        ui_events=_require(fields, "ui_events"),
    )