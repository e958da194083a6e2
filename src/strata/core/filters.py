"""Translate untrusted request filters into a parametrized WHERE clause.

Filters arrive as a mapping from ``"<column>[:<operator>]"`` to content,
typically from a query string such as::

    /users?filters[name:begins]=jo&filters[email]=example.org

===========  ========================  =====================
operator     condition                 bound value
===========  ========================  =====================
contains     ``column LIKE ?``         ``%content%``
begins       ``column LIKE ?``         ``content%``
ends         ``column LIKE ?``         ``%content``
equals       ``column = ?``            ``content``
===========  ========================  =====================

``contains`` is the default when no operator is given. Columns outside
the allow-list are dropped without error (clients probing for columns is
expected); an unknown operator is a malformed request and raises
:class:`~strata.core.errors.FilterError`.

All conditions are joined with OR. Subclasses can change that through
:meth:`FilterParser.combine` and add operators (or validate content per
operator) by extending :attr:`FilterParser.operators`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, ClassVar

from strata.core.errors import FilterError
from strata.core.logging import get_logger
from strata.core.protocols import ParameterSource
from strata.core.where import WhereClause, WhereCondition

logger = get_logger(__name__)

ConditionBuilder = Callable[[str, str], WhereCondition]


class MappingParameterSource:
    """:class:`ParameterSource` backed by a plain mapping (query string already parsed)."""

    def __init__(self, parameters: Mapping[str, Any] | None = None):
        self._parameters = dict(parameters or {})

    def get_parameter(self, name: str, default: Any = None) -> Any:
        return self._parameters.get(name, default)


class FilterParser:
    """Builds a :class:`WhereClause` from filter input, restricted to an allow-list.

    Parameters:
        allowed_columns: Public column names clients may filter on.
        parameter_source: Where :meth:`parse` reads the ``filters``
            parameter when no explicit mapping is given.
    """

    URL_PARAMETER = "filters"
    DEFAULT_OPERATOR = "contains"

    operators: ClassVar[dict[str, ConditionBuilder]] = {
        "contains": lambda column, content: WhereCondition.like(column, f"%{content}%"),
        "begins": lambda column, content: WhereCondition.like(column, f"{content}%"),
        "ends": lambda column, content: WhereCondition.like(column, f"%{content}"),
        "equals": lambda column, content: WhereCondition.equals(column, content),
    }

    def __init__(
        self,
        allowed_columns: Iterable[str] = (),
        *,
        parameter_source: ParameterSource | None = None,
    ):
        self._allowed_columns = frozenset(allowed_columns)
        self._parameter_source = parameter_source

    @property
    def allowed_columns(self) -> frozenset[str]:
        return self._allowed_columns

    def parse(
        self,
        filters: Mapping[str, Any] | None = None,
        column_conversion: Mapping[str, str] | None = None,
    ) -> WhereClause:
        """
        Build the WHERE clause for *filters*.

        Args:
            filters: Raw filter map; read from the parameter source when omitted.
            column_conversion: Public filter name → backing column/expression,
                for names that should not expose the real column.

        Raises:
            FilterError: A filter uses an unknown operator.
        """
        if filters is None:
            filters = self._read_filters()
        conversion = column_conversion or {}
        clause = WhereClause()
        for definition, content in filters.items():
            column, operator = self.split_definition(definition)
            if column not in self._allowed_columns:
                logger.debug("filter_column_ignored", column=column)
                continue
            builder = self.operators.get(operator)
            if builder is None:
                raise FilterError(
                    f"Unsupported filter operator « {operator} » for column « {column} »",
                    operator=operator,
                )
            condition = builder(conversion.get(column, column), self.normalize_content(content))
            self.combine(clause, condition)
        return clause

    def split_definition(self, definition: str) -> tuple[str, str]:
        """``"name:begins"`` → ``("name", "begins")``; ``"name"`` → ``("name", "contains")``."""
        if ":" not in definition:
            return definition, self.DEFAULT_OPERATOR
        column, operator = definition.split(":")[:2]
        return column, operator

    def normalize_content(self, content: Any) -> str:
        return "" if content is None else str(content)

    def combine(self, clause: WhereClause, condition: WhereCondition) -> None:
        """Attach *condition* to *clause* (single top-level disjunction)."""
        clause.or_(condition)

    def _read_filters(self) -> Mapping[str, Any]:
        if self._parameter_source is None:
            return {}
        filters = self._parameter_source.get_parameter(self.URL_PARAMETER, {})
        return filters if isinstance(filters, Mapping) else {}


__all__ = [
    "FilterParser",
    "MappingParameterSource",
]
