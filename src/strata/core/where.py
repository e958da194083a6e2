"""Parametrized WHERE clause tree.

A :class:`WhereClause` is an ordered list of children (leaf
:class:`WhereCondition` objects or nested clauses), each attached with a
connective. Rendering produces an SQL fragment with placeholders and the
list of values to bind, in placeholder order. Values never appear in the
SQL text; only column names/expressions do, and those come from code
(allow-lists, alias maps), never from the client.

    >>> clause = (
    ...     WhereClause()
    ...     .or_(WhereCondition.like("name", "%bob%"))
    ...     .or_(WhereCondition.equals("city", "Quebec"))
    ... )
    >>> clause.render()
    ('name LIKE ? OR city = ?', ['%bob%', 'Quebec'])
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Connective(str, Enum):
    AND = "AND"
    OR = "OR"


class ConditionOperator(str, Enum):
    LIKE = "LIKE"
    EQUALS = "="


@dataclass(frozen=True)
class WhereCondition:
    """Leaf condition: ``<column> <operator> <placeholder>``."""

    column: str
    operator: ConditionOperator
    value: Any

    @classmethod
    def like(cls, column: str, pattern: str) -> WhereCondition:
        return cls(column, ConditionOperator.LIKE, pattern)

    @classmethod
    def equals(cls, column: str, value: Any) -> WhereCondition:
        return cls(column, ConditionOperator.EQUALS, value)

    def render(self, placeholder: str = "?") -> tuple[str, list[Any]]:
        return f"{self.column} {self.operator.value} {placeholder}", [self.value]


class WhereClause:
    """Ordered tree of conditions joined by AND / OR."""

    def __init__(self) -> None:
        self._children: list[tuple[Connective, WhereCondition | WhereClause]] = []

    def and_(self, node: WhereCondition | WhereClause) -> WhereClause:
        self._children.append((Connective.AND, node))
        return self

    def or_(self, node: WhereCondition | WhereClause) -> WhereClause:
        self._children.append((Connective.OR, node))
        return self

    @property
    def conditions(self) -> list[WhereCondition]:
        """Every leaf condition, depth first, in rendering order."""
        leaves: list[WhereCondition] = []
        for _, node in self._children:
            if isinstance(node, WhereClause):
                leaves.extend(node.conditions)
            else:
                leaves.append(node)
        return leaves

    def is_empty(self) -> bool:
        return not self.conditions

    def __len__(self) -> int:
        return len(self.conditions)

    def render(self, placeholder: str = "?") -> tuple[str, list[Any]]:
        """
        Render to ``(sql_fragment, parameters)``.

        The connective of the first child is ignored. Nested clauses are
        parenthesized; empty nested clauses are skipped. An empty clause
        renders as ``("", [])``.
        """
        fragments: list[str] = []
        parameters: list[Any] = []
        for connective, node in self._children:
            sql, values = node.render(placeholder)
            if not sql:
                continue
            if isinstance(node, WhereClause):
                sql = f"({sql})"
            if fragments:
                fragments.append(connective.value)
            fragments.append(sql)
            parameters.extend(values)
        return " ".join(fragments), parameters

    def to_sql(self, placeholder: str = "?") -> tuple[str, list[Any]]:
        """Like :meth:`render`, prefixed with ``WHERE`` when not empty."""
        sql, parameters = self.render(placeholder)
        return (f"WHERE {sql}" if sql else ""), parameters

    def __repr__(self) -> str:
        sql, parameters = self.render()
        return f"WhereClause({sql!r}, {parameters!r})"


__all__ = [
    "Connective",
    "ConditionOperator",
    "WhereCondition",
    "WhereClause",
]
