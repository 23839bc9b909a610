"""Runtime value contracts.

A contract is any object implementing the :class:`Validator` protocol. The
engine only ever calls ``validate`` (and ``json_schema`` when advertising a
tool to a model), so contracts can be declared with the small combinators in
this module or with any type pydantic understands via
:class:`PydanticValidator`.

Validators report every violation they find instead of stopping at the first.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

PathItem = str | int


@dataclass(frozen=True, slots=True)
class Violation:
    """A single reason a value failed a contract."""

    path: tuple[PathItem, ...]
    message: str

    def __str__(self) -> str:
        return f"{format_path(self.path)}: {self.message}"

    def prefixed(self, *prefix: PathItem) -> Violation:
        return Violation(path=(*prefix, *self.path), message=self.message)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    value: Any
    violations: tuple[Violation, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.violations

    @staticmethod
    def accept(value: Any) -> ValidationResult:
        return ValidationResult(value=value)

    @staticmethod
    def reject(value: Any, violations: Iterable[Violation]) -> ValidationResult:
        return ValidationResult(value=value, violations=tuple(violations))


@runtime_checkable
class Validator(Protocol):
    """Accepts or rejects a value, explaining every rejection."""

    def validate(self, value: Any) -> ValidationResult: ...

    def json_schema(self) -> dict[str, Any]: ...


def format_path(path: Sequence[PathItem]) -> str:
    if not path:
        return "<root>"
    out = ""
    for item in path:
        if isinstance(item, int):
            out += f"[{item}]"
        else:
            out += f".{item}" if out else str(item)
    return out


_JSON_TYPES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    type(None): "null",
}


def _type_label(kind: type | tuple[type, ...]) -> str:
    kinds = kind if isinstance(kind, tuple) else (kind,)
    return " | ".join(k.__name__ for k in kinds)


@dataclass(frozen=True, slots=True)
class PrimitiveValidator:
    """Checks a scalar's type plus optional bounds.

    ``bool`` is never accepted where a number is expected, and ``int`` is
    accepted where ``float`` is.
    """

    kind: type | tuple[type, ...]
    ge: float | None = None
    le: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None

    def _accepts_type(self, value: Any) -> bool:
        kinds = self.kind if isinstance(self.kind, tuple) else (self.kind,)
        if isinstance(value, bool) and bool not in kinds:
            return False
        if float in kinds and isinstance(value, int):
            return True
        return isinstance(value, kinds)

    def validate(self, value: Any) -> ValidationResult:
        if not self._accepts_type(value):
            return ValidationResult.reject(
                value,
                [Violation((), f"expected {_type_label(self.kind)}, got {type(value).__name__}")],
            )

        violations: list[Violation] = []
        if self.ge is not None and value < self.ge:
            violations.append(Violation((), f"must be >= {self.ge}"))
        if self.le is not None and value > self.le:
            violations.append(Violation((), f"must be <= {self.le}"))
        if self.min_length is not None and len(value) < self.min_length:
            violations.append(Violation((), f"length must be >= {self.min_length}"))
        if self.max_length is not None and len(value) > self.max_length:
            violations.append(Violation((), f"length must be <= {self.max_length}"))
        if self.pattern is not None and re.fullmatch(self.pattern, str(value)) is None:
            violations.append(Violation((), f"must match pattern {self.pattern!r}"))
        return ValidationResult(value=value, violations=tuple(violations))

    def json_schema(self) -> dict[str, Any]:
        kinds = self.kind if isinstance(self.kind, tuple) else (self.kind,)
        names = [_JSON_TYPES[k] for k in kinds if k in _JSON_TYPES]
        schema: dict[str, Any] = {}
        if names:
            schema["type"] = names[0] if len(names) == 1 else names
        if self.ge is not None:
            schema["minimum"] = self.ge
        if self.le is not None:
            schema["maximum"] = self.le
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.max_length is not None:
            schema["maxLength"] = self.max_length
        if self.pattern is not None:
            schema["pattern"] = self.pattern
        return schema


@dataclass(frozen=True, slots=True)
class OptionalValidator:
    """Accepts ``None`` or whatever ``inner`` accepts."""

    inner: Validator

    def validate(self, value: Any) -> ValidationResult:
        if value is None:
            return ValidationResult.accept(None)
        return self.inner.validate(value)

    def json_schema(self) -> dict[str, Any]:
        return {"anyOf": [self.inner.json_schema(), {"type": "null"}]}


@dataclass(frozen=True, slots=True)
class ObjectValidator:
    """Validates a mapping field by field.

    Fields listed in ``optional`` may be missing. Unknown keys are kept unless
    ``allow_extra`` is false, in which case each one is a violation.
    """

    fields: Mapping[str, Validator]
    optional: frozenset[str] = field(default_factory=frozenset)
    allow_extra: bool = True

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, Mapping):
            return ValidationResult.reject(
                value, [Violation((), f"expected object, got {type(value).__name__}")]
            )

        violations: list[Violation] = []
        out: dict[str, Any] = dict(value) if self.allow_extra else {}
        for name, validator in self.fields.items():
            if name not in value:
                if name not in self.optional:
                    violations.append(Violation((name,), "required"))
                continue
            result = validator.validate(value[name])
            violations.extend(v.prefixed(name) for v in result.violations)
            out[name] = result.value

        if not self.allow_extra:
            for name in value:
                if name not in self.fields:
                    violations.append(Violation((str(name),), "unexpected field"))

        return ValidationResult(value=out, violations=tuple(violations))

    def json_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {name: v.json_schema() for name, v in self.fields.items()},
            "required": [name for name in self.fields if name not in self.optional],
            "additionalProperties": self.allow_extra,
        }


@dataclass(frozen=True, slots=True)
class EnumValidator:
    choices: tuple[Any, ...]

    def validate(self, value: Any) -> ValidationResult:
        if value in self.choices:
            return ValidationResult.accept(value)
        allowed = ", ".join(repr(c) for c in self.choices)
        return ValidationResult.reject(value, [Violation((), f"must be one of {allowed}")])

    def json_schema(self) -> dict[str, Any]:
        return {"enum": list(self.choices)}


@dataclass(frozen=True, slots=True)
class ArrayValidator:
    item: Validator
    min_length: int | None = None
    max_length: int | None = None

    def validate(self, value: Any) -> ValidationResult:
        if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Sequence):
            return ValidationResult.reject(
                value, [Violation((), f"expected array, got {type(value).__name__}")]
            )

        violations: list[Violation] = []
        if self.min_length is not None and len(value) < self.min_length:
            violations.append(Violation((), f"length must be >= {self.min_length}"))
        if self.max_length is not None and len(value) > self.max_length:
            violations.append(Violation((), f"length must be <= {self.max_length}"))

        items: list[Any] = []
        for index, item in enumerate(value):
            result = self.item.validate(item)
            violations.extend(v.prefixed(index) for v in result.violations)
            items.append(result.value)
        return ValidationResult(value=items, violations=tuple(violations))

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "array", "items": self.item.json_schema()}
        if self.min_length is not None:
            schema["minItems"] = self.min_length
        if self.max_length is not None:
            schema["maxItems"] = self.max_length
        return schema


@dataclass(frozen=True, slots=True)
class PredicateValidator:
    """Refines ``inner`` with an extra check; runs only if ``inner`` passes."""

    inner: Validator
    predicate: Callable[[Any], bool]
    message: str

    def validate(self, value: Any) -> ValidationResult:
        result = self.inner.validate(value)
        if not result.ok:
            return result
        if not self.predicate(result.value):
            return ValidationResult.reject(result.value, [Violation((), self.message)])
        return result

    def json_schema(self) -> dict[str, Any]:
        return self.inner.json_schema()


class PydanticValidator:
    """Adapts any pydantic-validatable type (models, TypedDicts, annotated types)."""

    def __init__(self, tp: Any) -> None:
        self.tp = tp
        self._adapter: TypeAdapter[Any] = TypeAdapter(tp)

    def validate(self, value: Any) -> ValidationResult:
        try:
            return ValidationResult.accept(self._adapter.validate_python(value))
        except PydanticValidationError as e:
            violations = [
                Violation(path=tuple(err["loc"]), message=err["msg"]) for err in e.errors()
            ]
            return ValidationResult.reject(value, violations)

    def json_schema(self) -> dict[str, Any]:
        return self._adapter.json_schema()

    def __repr__(self) -> str:
        return f"PydanticValidator({self.tp!r})"
