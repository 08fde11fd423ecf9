"""Function object describing regexp_extract to a host engine."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pyarrow as pa

from regexp_extract.config import ExtractConfig
from regexp_extract.kernel import ArgumentValue, invoke
from regexp_extract.signature import ARGUMENT_SPECS, ValueKind, return_type
from serde_msgspec import StructBaseStrict, to_builtins


class ArgumentDoc(StructBaseStrict, frozen=True):
    """Documentation for one function argument."""

    name: str
    description: str


class FunctionDoc(StructBaseStrict, frozen=True):
    """User-facing documentation for a scalar function."""

    section: str
    description: str
    syntax_example: str
    sql_example: str
    arguments: tuple[ArgumentDoc, ...] = ()


_DOCUMENTATION = FunctionDoc(
    section="Regular Expression Functions",
    description=(
        "Returns the text captured by a group of the first regular expression "
        "match in a string, or null when there is no match."
    ),
    syntax_example="regexp_extract(str, regexp[, group_index][, flags])",
    sql_example=(
        "> select regexp_extract('Köln', '[a-zA-Z]ö[a-zA-Z]{2}', 0);\n"
        "Köln\n"
        "> select regexp_extract('aBc', '(b|d)', 1, 'i');\n"
        "B"
    ),
    arguments=(
        ArgumentDoc(
            name="str",
            description="String expression to operate on. Can be a constant or column.",
        ),
        ArgumentDoc(
            name="regexp",
            description="Regular expression to match against. Can be a constant or column.",
        ),
        ArgumentDoc(
            name="group_index",
            description=(
                "A one-based index to the matching group to extract. "
                "If 0 is provided, will retrieve the full match. Defaults to 1."
            ),
        ),
        ArgumentDoc(
            name="flags",
            description=(
                "Optional regular expression flags: i (case-insensitive), "
                "m (multi-line mode), s (let . match newline)."
            ),
        ),
    ),
)


class RegexpExtractFunc:
    """Scalar function implementation of ``regexp_extract``."""

    name = "regexp_extract"
    aliases: tuple[str, ...] = ()
    volatility = "immutable"

    def __init__(self, *, config: ExtractConfig | None = None) -> None:
        self._config = config

    @property
    def arg_names(self) -> tuple[str, ...]:
        """Return positional argument names."""
        return tuple(spec.name for spec in ARGUMENT_SPECS)

    @property
    def arg_kinds(self) -> tuple[ValueKind, ...]:
        """Return the logical value kind accepted at each position."""
        return tuple(spec.kind for spec in ARGUMENT_SPECS)

    def return_type(self, arg_types: Sequence[pa.DataType]) -> pa.DataType:
        """Return the result type for the given argument types.

        Returns
        -------
        pyarrow.DataType
            Nullable string type matching the subject width.
        """
        return return_type(arg_types)

    def documentation(self) -> FunctionDoc:
        """Return user-facing documentation.

        Returns
        -------
        FunctionDoc
            Documentation payload.
        """
        return _DOCUMENTATION

    def documentation_payload(self) -> Mapping[str, object]:
        """Return documentation as builtin types for docs snapshots.

        Returns
        -------
        Mapping[str, object]
            Documentation keyed by field name, including ``name``.
        """
        payload = to_builtins(_DOCUMENTATION)
        if not isinstance(payload, dict):
            msg = "Function documentation did not serialize to a mapping."
            raise TypeError(msg)
        return {"name": self.name, **payload}

    def invoke_with_args(
        self,
        args: Sequence[ArgumentValue],
        *,
        number_rows: int | None = None,
    ) -> pa.Array | pa.Scalar:
        """Evaluate the function over one batch.

        Returns
        -------
        pyarrow.Array | pyarrow.Scalar
            Extracted column, or a scalar when every argument is scalar.
        """
        return invoke(args, number_rows=number_rows, config=self._config)


__all__ = ["ArgumentDoc", "FunctionDoc", "RegexpExtractFunc"]
