"""Module that supports validation of arguments."""

import inspect
import types
import typing
import wrapt

from collections.abc import Callable
from contextlib import contextmanager
from types import NoneType
from typing import Any


class ValidationError(ValueError):
    """Error raised when validation fails."""

    __slots__ = {"message", "path"}

    def __init__(self, message: str | None = None, path: list[str | int] | None = None):
        self.message = message
        self.path = path

    def __repr__(self):
        return f"{self.__class__.__name__}({self.message!r}, {self.path!r})"

    def __str__(self):
        result = []
        if self.message is not None:
            result.append(str(self.message))
        if self.path:
            result.append(f"({'.'.join((str(a) for a in self.path))})")
        return " ".join(result)


@contextmanager
def validation_error_path(segment: str | int):
    """Context manager to prefix the path of a raised validation error."""
    try:
        yield
    except ValidationError as ve:
        ve.path = [segment, *(ve.path or [])]
        raise


class Validator:
    """Base class for type annotation that performs validation."""

    def validate(self, value: Any) -> None:
        raise NotImplementedError


class MinLen(Validator):
    """Type annotation that validates a value has a minimum length."""

    __slots__ = {"value"}

    def __init__(self, value: int):
        self.value = value

    def validate(self, value: Any) -> None:
        if len(value) < self.value:
            raise ValidationError(f"minimum length: {self.value}")

    def __repr__(self):
        return f"MinLen({self.value})"


class MinValue(Validator):
    """Type annotation that validates a value has a minimum value."""

    __slots__ = {"value"}

    def __init__(self, value: Any):
        self.value = value

    def validate(self, value: Any) -> None:
        if value < self.value:
            raise ValidationError(f"minimum value: {self.value}")

    def __repr__(self):
        return f"MinValue({self.value})"


def _split_annotated(type_hint: Any) -> tuple[Any, tuple[Any, ...]]:
    if typing.get_origin(type_hint) is not typing.Annotated:
        return type_hint, ()
    args = typing.get_args(type_hint)
    return args[0], args[1:]


def validate(value: Any, type_hint: Any) -> NoneType:
    """
    Validate a value against a type hint.

    Only plain classes, optional classes and Annotated validators are supported; generic
    containers are checked against their origin type only.
    """

    python_type, annotations = _split_annotated(type_hint)
    origin = typing.get_origin(python_type)
    args = typing.get_args(python_type)

    if python_type is Any:
        pass
    elif origin in {typing.Union, types.UnionType}:
        if value is None and NoneType in args:
            return
        if not isinstance(value, tuple(a for a in args if isinstance(a, type))):
            raise ValidationError(f"expecting union of {args}; received: {type(value)}")
    elif isinstance(python_type, type):
        if python_type is int and isinstance(value, bool):  # bool is subclass of int
            raise ValidationError("expecting int; received bool")
        if not isinstance(value, origin or python_type):
            raise ValidationError(f"expecting {python_type.__name__}; received {type(value)}")

    for annotation in annotations:
        if isinstance(annotation, Validator):
            annotation.validate(value)


def validate_arguments(callable: Callable):
    """Decorate a function or coroutine to validate its arguments using type annotations."""

    sig = inspect.signature(callable)

    positional_params = [
        p.name
        for p in sig.parameters.values()
        if p.kind in {p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD}
    ]

    def _validate(instance, args, kwargs):
        hints = typing.get_type_hints(callable, include_extras=True)
        if instance:
            args = (instance, *args)
        params = {
            **{p: v for p, v in zip(positional_params, args)},
            **kwargs,
        }
        for param in (p for p in sig.parameters.values() if p.name in params):
            if hint := hints.get(param.name):
                with validation_error_path(param.name):
                    validate(params[param.name], hint)

    if inspect.iscoroutinefunction(callable):

        @wrapt.decorator
        async def decorator(wrapped, instance, args, kwargs):
            _validate(instance, args, kwargs)
            return await wrapped(*args, **kwargs)

    else:

        @wrapt.decorator
        def decorator(wrapped, instance, args, kwargs):
            _validate(instance, args, kwargs)
            return wrapped(*args, **kwargs)

    return decorator(callable)
