"""Tests for WHERE clause rendering."""

from __future__ import annotations

from strata.core.where import ConditionOperator, WhereClause, WhereCondition


class TestWhereCondition:
    def test_like(self):
        condition = WhereCondition.like("name", "%bob%")
        assert condition.operator is ConditionOperator.LIKE
        assert condition.render() == ("name LIKE ?", ["%bob%"])

    def test_equals_with_dialect_placeholder(self):
        assert WhereCondition.equals("id", 4).render("%s") == ("id = %s", [4])


class TestWhereClause:
    def test_empty(self):
        clause = WhereClause()
        assert clause.is_empty()
        assert len(clause) == 0
        assert clause.render() == ("", [])
        assert clause.to_sql() == ("", [])

    def test_first_connective_ignored(self):
        clause = WhereClause().and_(WhereCondition.equals("a", 1)).or_(WhereCondition.equals("b", 2))
        assert clause.render() == ("a = ? OR b = ?", [1, 2])

    def test_nested_parenthesized(self):
        inner = WhereClause().or_(WhereCondition.like("name", "a%")).or_(WhereCondition.like("name", "b%"))
        clause = WhereClause().and_(WhereCondition.equals("active", True)).and_(inner)
        assert clause.render() == (
            "active = ? AND (name LIKE ? OR name LIKE ?)",
            [True, "a%", "b%"],
        )
        assert len(clause) == 3

    def test_empty_nested_skipped(self):
        clause = WhereClause().and_(WhereClause()).and_(WhereCondition.equals("x", 1))
        assert clause.render() == ("x = ?", [1])
        assert not clause.is_empty()

    def test_parameters_in_placeholder_order(self):
        clause = (
            WhereClause()
            .or_(WhereCondition.equals("a", "first"))
            .or_(WhereClause().and_(WhereCondition.equals("b", "second")).and_(WhereCondition.equals("c", "third")))
            .or_(WhereCondition.equals("d", "fourth"))
        )
        sql, parameters = clause.render()
        assert sql == "a = ? OR (b = ? AND c = ?) OR d = ?"
        assert parameters == ["first", "second", "third", "fourth"]
        assert [c.column for c in clause.conditions] == ["a", "b", "c", "d"]

    def test_values_never_in_sql(self):
        clause = WhereClause().or_(WhereCondition.like("name", "%'; DROP TABLE users; --%"))
        sql, _ = clause.render()
        assert "DROP" not in sql

    def test_to_sql_prefix(self):
        clause = WhereClause().or_(WhereCondition.equals("id", 1))
        assert clause.to_sql("%s") == ("WHERE id = %s", [1])

    def test_executes_against_sqlite(self, seeded_database):
        clause = WhereClause().or_(WhereCondition.equals("code", "A1")).or_(WhereCondition.like("name", "g%"))
        where, parameters = clause.to_sql(seeded_database.placeholder)
        rows = list(seeded_database.query(f"SELECT name FROM items {where} ORDER BY id", parameters))
        assert [row["name"] for row in rows] == ["alpha", "gamma"]
