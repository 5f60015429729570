"""Command parameters and placeholder normalization.

Command text uses `:name` placeholders. They are converted to the
adapter's paramstyle ('named', 'pyformat' or 'qmark'), excluding string
literals and PostgreSQL `::typecast` syntax.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from rowset.core.enums import ParameterDirection
from rowset.core.exceptions import ParameterBindingError

# Matches :name but not ::typecast and not inside words
# Negative lookbehind for : (handles ::), \w (handles mid-word colons)
_PARAM_PATTERN = re.compile(r"(?<![:\w]):([a-zA-Z_]\w*)")

# Matches single-quoted string literals (with escaped quotes handled)
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'")

_PARAMSTYLES = frozenset({"named", "pyformat", "qmark"})


@dataclass
class Parameter:
    """A single named command parameter."""

    name: str
    value: Any = None
    direction: ParameterDirection = ParameterDirection.INPUT
    db_type: Any = None

    @property
    def is_output(self) -> bool:
        return self.direction is not ParameterDirection.INPUT


class ParameterCollection:
    """Ordered collection of named parameters for one command.

    Names are stored without a leading ``@`` or ``:``. Insertion order is
    the positional order used for stored procedure calls.
    """

    def __init__(self) -> None:
        self._parameters: dict[str, Parameter] = {}

    @staticmethod
    def _key(name: str) -> str:
        key = name.lstrip("@:")
        if not key:
            raise ParameterBindingError(name, "parameter name is empty")
        return key

    def add(
        self,
        name: str,
        value: Any = None,
        *,
        direction: ParameterDirection = ParameterDirection.INPUT,
        db_type: Any = None,
    ) -> Parameter:
        """Add a parameter.

        Raises:
            ParameterBindingError: If the name is empty or already present.
        """
        key = self._key(name)
        if key in self._parameters:
            raise ParameterBindingError(key, "parameter already added")
        parameter = Parameter(key, value, direction, db_type)
        self._parameters[key] = parameter
        return parameter

    def add_when(self, condition: bool, name: str, value: Any = None, **kwargs: Any) -> None:
        """Add a parameter only when *condition* is true."""
        if condition:
            self.add(name, value, **kwargs)

    def update(self, values: Mapping[str, Any]) -> None:
        """Add every item of *values* as an input parameter."""
        for name, value in values.items():
            self.add(name, value)

    def __getitem__(self, name: str) -> Parameter:
        try:
            return self._parameters[self._key(name)]
        except KeyError:
            raise ParameterBindingError(name, "no such parameter") from None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lstrip("@:") in self._parameters

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._parameters.values())

    def __len__(self) -> int:
        return len(self._parameters)

    def values(self) -> dict[str, Any]:
        """Return the name to value mapping passed to the driver."""
        return {p.name: p.value for p in self._parameters.values()}

    def outputs(self) -> dict[str, Any]:
        """Return current values of output and input/output parameters."""
        return {p.name: p.value for p in self._parameters.values() if p.is_output}

    @property
    def has_outputs(self) -> bool:
        return any(p.is_output for p in self._parameters.values())


def build_parameters(
    parameters: Callable[[ParameterCollection], None] | Mapping[str, Any] | None,
) -> ParameterCollection:
    """Run the binder (or copy the mapping) into a new collection."""
    collection = ParameterCollection()
    if parameters is None:
        return collection
    if isinstance(parameters, Mapping):
        collection.update(parameters)
    else:
        parameters(collection)
    return collection


def normalize_params(sql: str, paramstyle: str) -> str:
    """Convert :name parameters to the target param style.

    Args:
        sql: SQL string with :name parameters.
        paramstyle: Target style - 'named' (no conversion), 'pyformat'
            (%(name)s) or 'qmark' (?).

    Returns:
        SQL with parameters converted to the target style.
    """
    if paramstyle == "named":
        return sql
    if paramstyle not in _PARAMSTYLES:
        raise ValueError(f"Unsupported paramstyle: {paramstyle}")
    return _convert(sql, paramstyle)[0]


def placeholder_names(sql: str) -> tuple[str, ...]:
    """Return the :name placeholders of *sql* in order of appearance."""
    return _convert(sql, "qmark")[1]


def bind_statement(
    sql: str,
    parameters: ParameterCollection,
    paramstyle: str,
) -> tuple[str, dict[str, Any] | tuple[Any, ...]]:
    """Return ``(sql, params)`` ready for ``cursor.execute``.

    Named styles receive the parameter dict; 'qmark' receives a tuple
    ordered by placeholder appearance (a name may repeat).

    Raises:
        ParameterBindingError: If a 'qmark' placeholder has no parameter.
    """
    if paramstyle != "qmark":
        return normalize_params(sql, paramstyle), parameters.values()
    converted, names = _convert(sql, "qmark")
    values = parameters.values()
    missing = [name for name in names if name not in values]
    if missing:
        raise ParameterBindingError(missing[0], "placeholder has no bound value")
    return converted, tuple(values[name] for name in names)


@lru_cache(maxsize=256)
def _convert(sql: str, paramstyle: str) -> tuple[str, tuple[str, ...]]:
    """Convert :name params, preserving string literals."""
    names: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        names.append(match.group(1))
        return "?" if paramstyle == "qmark" else f"%({match.group(1)})s"

    # Tokenize: split into string literals and non-literal segments
    parts: list[str] = []
    last_end = 0

    for match in _STRING_LITERAL_PATTERN.finditer(sql):
        start, end = match.span()
        if start > last_end:
            parts.append(_PARAM_PATTERN.sub(_replace, sql[last_end:start]))
        parts.append(match.group())
        last_end = end

    if last_end < len(sql):
        parts.append(_PARAM_PATTERN.sub(_replace, sql[last_end:]))

    return "".join(parts), tuple(names)
