import dataclasses
import sqlite3

import pytest

from models.user import User


def test_defaults_are_unassigned():
    u = User(first_name="A", last_name="B")
    if u.uid is not None:
        raise AssertionError


def test_display_name_and_str():
    u = User(1, "Pepe", "Botella")
    if u.display_name != "Pepe Botella":
        raise AssertionError
    if str(u) != "Pepe Botella":
        raise AssertionError


def test_display_name_with_missing_parts():
    assert User(1, None, "Botella").display_name == "Botella"
    assert User(1, "Pepe", None).display_name == "Pepe"
    assert User(1).display_name == ""


def test_equality_by_value():
    assert User(1, "Pepe", "Botella") == User(1, "Pepe", "Botella")
    assert User(1, "Pepe", "Botella") != User(2, "Pepe", "Botella")


def test_users_are_immutable():
    u = User(1, "Pepe", "Botella")
    with pytest.raises(dataclasses.FrozenInstanceError):
        u.first_name = "Otro"  # type: ignore[misc]


def test_to_db_dict_omits_unassigned_uid():
    assert User(first_name="A", last_name="B").to_db_dict() == {
        "first_name": "A",
        "last_name": "B",
    }
    assert User(5, "A", "B").to_db_dict() == {"uid": 5, "first_name": "A", "last_name": "B"}


def test_from_mapping():
    u = User.from_row({"uid": "3", "first_name": "el diablo", "last_name": "mami"})
    if u != User(3, "el diablo", "mami"):
        raise AssertionError


def test_from_sqlite_row():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    try:
        row = conn.execute(
            "SELECT 2 AS uid, 'Pepe' AS first_name, NULL AS last_name"
        ).fetchone()
    finally:
        conn.close()
    assert User.from_row(row) == User(2, "Pepe", None)
