"""
Tests for ResilientDB functionality
"""

import sqlite3
from unittest.mock import Mock, patch

import pytest

from database.resilient_db import ResilientDB


class TestResilientDB:
    """Test ResilientDB class"""

    def test_init_with_path_and_schema_initializer(self, temp_db_dir):
        db_path = temp_db_dir / "test.db"
        schema_initializer = Mock()

        db = ResilientDB(db_path, schema_initializer)

        assert db.db_path == db_path
        assert db.schema_initializer == schema_initializer
        assert db.user_feedback is print

    def test_connect_runs_schema_initializer(self, temp_db_dir):
        db_path = temp_db_dir / "test.db"
        schema_initializer = Mock()

        conn = ResilientDB(db_path, schema_initializer).connect()
        try:
            schema_initializer.assert_called_once_with(conn)
            assert conn.row_factory is sqlite3.Row
        finally:
            conn.close()

    def test_attempt_connection_closes_on_schema_failure(self, temp_db_dir):
        db_path = temp_db_dir / "test.db"
        mock_connection = Mock()

        with patch("sqlite3.connect", return_value=mock_connection):
            db = ResilientDB(db_path, Mock(side_effect=ValueError("bad schema")))
            with pytest.raises(ValueError):
                db._attempt_connection()

        mock_connection.close.assert_called_once()

    def test_connect_with_retry_recovers_from_corruption(self, temp_db_dir):
        db_path = temp_db_dir / "corrupted.db"
        db_path.write_text("this is not a sqlite file " * 10)
        messages = []

        db = ResilientDB(
            db_path,
            lambda c: c.execute("CREATE TABLE IF NOT EXISTS t (x INTEGER)"),
            messages.append,
        )
        conn = db.connect_with_retry(delay=0)
        conn.close()

        backups = list((temp_db_dir / "backups").glob("corrupted_corrupted_*.db"))
        assert len(backups) == 1
        assert any("Backup saved" in m for m in messages)

    def test_connect_with_retry_retries_operational_errors(self, temp_db_dir):
        db_path = temp_db_dir / "busy.db"
        good = Mock()
        db = ResilientDB(db_path, Mock(), Mock())

        with (
            patch.object(
                db,
                "_attempt_connection",
                side_effect=[sqlite3.OperationalError("database is locked"), good],
            ),
            patch.object(db, "_backup_corrupted_db") as mock_backup,
            patch("time.sleep"),
        ):
            assert db.connect_with_retry() is good

        mock_backup.assert_not_called()

    def test_connect_with_retry_gives_up(self, temp_db_dir):
        db = ResilientDB(temp_db_dir / "busy.db", Mock(), Mock())

        with (
            patch.object(
                db, "_attempt_connection", side_effect=sqlite3.OperationalError("locked")
            ) as attempt,
            patch("time.sleep"),
        ):
            with pytest.raises(RuntimeError, match="after all retry attempts"):
                db.connect_with_retry(retries=3)

        assert attempt.call_count == 3

    def test_connect_with_retry_reraises_non_transient_errors(self, temp_db_dir):
        db = ResilientDB(temp_db_dir / "x.db", Mock(), Mock())

        with patch.object(
            db, "_attempt_connection", side_effect=sqlite3.IntegrityError("constraint")
        ):
            with pytest.raises(sqlite3.IntegrityError):
                db.connect_with_retry()

    def test_permission_error_becomes_runtime_error(self, temp_db_dir):
        feedback = Mock()
        db = ResilientDB(temp_db_dir / "x.db", Mock(), feedback)

        with patch.object(db, "_attempt_connection", side_effect=PermissionError("denied")):
            with pytest.raises(RuntimeError, match="permission"):
                db.connect()

        feedback.assert_called_once()

    def test_backup_missing_file_is_noop(self, temp_db_dir):
        db = ResilientDB(temp_db_dir / "missing.db", Mock(), Mock())
        db._backup_corrupted_db()
        assert not (temp_db_dir / "backups").exists()
