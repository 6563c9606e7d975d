import pytest

from infrastructure.database.sql_safety import ColumnSet

AREAS = ColumnSet("Areas", "area_id", {"name", "emoji"})


def test_insert_sql_keeps_only_allowed_columns():
    sql, params = AREAS.insert_sql({"name": "Balcony", "emoji": "🌿", "area_id": 5, "evil; DROP": 1})

    assert sql == "INSERT INTO Areas (name, emoji) VALUES (?, ?)"
    assert params == ["Balcony", "🌿"]


def test_update_sql_appends_key():
    assert AREAS.update_sql(3, {"name": "Patio"}) == ("UPDATE Areas SET name = ? WHERE area_id = ?", ["Patio", 3])
    assert AREAS.update_sql(3, {"unknown": 1}) is None


def test_insert_without_columns_is_rejected():
    with pytest.raises(ValueError):
        AREAS.insert_sql({})


def test_identifiers_are_validated():
    with pytest.raises(ValueError):
        ColumnSet("Areas; --", "area_id", {"name"})
    with pytest.raises(ValueError):
        ColumnSet("Areas", "area_id", {"name", "bad column"})
