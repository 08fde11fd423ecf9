"""Argument validation and result typing for regexp_extract."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

import pyarrow as pa
import pyarrow.types as patypes

from regexp_extract.errors import InvalidSignatureError
from regexp_extract.readers import ColumnLike, is_integer_like, is_string_like

MIN_ARGUMENTS = 2
MAX_ARGUMENTS = 4
_GROUP_INDEX_SLOT = 2
_FLAGS_SLOT = 3


class ArgumentShape(StrEnum):
    """Whether an argument holds one value or one value per row."""

    SCALAR = "scalar"
    ARRAY = "array"


class ValueKind(StrEnum):
    """Logical value kind accepted at an argument position."""

    STRING = "string"
    INTEGER = "integer"


@dataclass(frozen=True)
class ArgumentSpec:
    """Declared name and kind for one positional argument."""

    name: str
    kind: ValueKind


ARGUMENT_SPECS: tuple[ArgumentSpec, ...] = (
    ArgumentSpec(name="str", kind=ValueKind.STRING),
    ArgumentSpec(name="regexp", kind=ValueKind.STRING),
    ArgumentSpec(name="group_index", kind=ValueKind.INTEGER),
    ArgumentSpec(name="flags", kind=ValueKind.STRING),
)


@dataclass(frozen=True)
class ResolvedArgument:
    """One validated argument with its shape and Arrow type."""

    position: int
    spec: ArgumentSpec
    shape: ArgumentShape
    dtype: pa.DataType
    value: pa.Scalar | ColumnLike

    @property
    def is_array(self) -> bool:
        """Return True when the argument varies per row.

        Returns
        -------
        bool
            ``True`` for array arguments.
        """
        return self.shape is ArgumentShape.ARRAY


@dataclass(frozen=True)
class ExtractPlan:
    """Validated call plan recording the shape of each argument."""

    arguments: tuple[ResolvedArgument, ...]
    return_type: pa.DataType

    @property
    def subject(self) -> ResolvedArgument:
        """Return the subject argument."""
        return self.arguments[0]

    @property
    def pattern(self) -> ResolvedArgument:
        """Return the pattern argument."""
        return self.arguments[1]

    @property
    def group_index(self) -> ResolvedArgument | None:
        """Return the group index argument, when supplied."""
        return self._slot(_GROUP_INDEX_SLOT)

    @property
    def flags(self) -> ResolvedArgument | None:
        """Return the flags argument, when supplied."""
        return self._slot(_FLAGS_SLOT)

    def _slot(self, index: int) -> ResolvedArgument | None:
        return self.arguments[index] if len(self.arguments) > index else None

    @property
    def array_arguments(self) -> tuple[ResolvedArgument, ...]:
        """Return the arguments that vary per row."""
        return tuple(argument for argument in self.arguments if argument.is_array)

    @property
    def all_scalar(self) -> bool:
        """Return True when no argument varies per row."""
        return not self.array_arguments


def _accepts(kind: ValueKind, dtype: pa.DataType) -> bool:
    if kind is ValueKind.STRING:
        return is_string_like(dtype)
    return is_integer_like(dtype)


def _check_arity(count: int) -> None:
    if MIN_ARGUMENTS <= count <= MAX_ARGUMENTS:
        return
    raise InvalidSignatureError(
        position=None,
        expected=f"{MIN_ARGUMENTS} to {MAX_ARGUMENTS} arguments",
        actual=f"{count} argument(s)",
    )


def _as_arrow(position: int, value: object) -> pa.Scalar | ColumnLike:
    if isinstance(value, (pa.Array, pa.ChunkedArray, pa.Scalar)):
        return value
    if value is None:
        return pa.scalar(None, type=pa.null())
    if isinstance(value, str):
        return pa.scalar(value, type=pa.string())
    spec = ARGUMENT_SPECS[position]
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return pa.scalar(value, type=pa.int64())
        except (OverflowError, pa.ArrowInvalid) as exc:
            msg = f"{spec.kind} within the int64 range for {spec.name!r}"
            raise InvalidSignatureError(
                position=position + 1,
                expected=msg,
                actual=str(value),
            ) from exc
    raise InvalidSignatureError(
        position=position + 1,
        expected=f"{spec.kind} scalar or Arrow column for {spec.name!r}",
        actual=type(value).__name__,
    )


def return_type(arg_types: Sequence[pa.DataType]) -> pa.DataType:
    """Return the result type for the given argument types.

    Parameters
    ----------
    arg_types
        Arrow types of the positional arguments.

    Returns
    -------
    pyarrow.DataType
        ``large_string`` for a large string subject, ``string`` otherwise.

    Raises
    ------
    InvalidSignatureError
        Raised when the arity or an argument type is not accepted.
    """
    _check_arity(len(arg_types))
    for position, (spec, dtype) in enumerate(zip(ARGUMENT_SPECS, arg_types, strict=False)):
        if not _accepts(spec.kind, dtype):
            raise InvalidSignatureError(
                position=position + 1,
                expected=f"{spec.kind} type for {spec.name!r}",
                actual=str(dtype),
            )
    subject_type = arg_types[0]
    if patypes.is_dictionary(subject_type):
        subject_type = subject_type.value_type
    if patypes.is_large_string(subject_type):
        return pa.large_string()
    return pa.string()


def resolve_signature(args: Sequence[object]) -> ExtractPlan:
    """Validate raw arguments and record which ones are arrays.

    Parameters
    ----------
    args
        Positional arguments ``(subject, pattern[, group_index][, flags])``.
        Each is an Arrow array, chunked array, scalar, or plain Python value.

    Returns
    -------
    ExtractPlan
        Plan describing every argument and the declared result type.
    """
    _check_arity(len(args))
    resolved: list[ResolvedArgument] = []
    for position, raw in enumerate(args):
        value = _as_arrow(position, raw)
        shape = ArgumentShape.SCALAR if isinstance(value, pa.Scalar) else ArgumentShape.ARRAY
        resolved.append(
            ResolvedArgument(
                position=position + 1,
                spec=ARGUMENT_SPECS[position],
                shape=shape,
                dtype=value.type,
                value=value,
            )
        )
    result = return_type([argument.dtype for argument in resolved])
    return ExtractPlan(arguments=tuple(resolved), return_type=result)


__all__ = [
    "ARGUMENT_SPECS",
    "MAX_ARGUMENTS",
    "MIN_ARGUMENTS",
    "ArgumentShape",
    "ArgumentSpec",
    "ExtractPlan",
    "ResolvedArgument",
    "ValueKind",
    "resolve_signature",
    "return_type",
]
