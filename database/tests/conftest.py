"""
Shared fixtures and test configuration for database tests
"""

from unittest.mock import MagicMock

import pytest

from database.factory import reset_database
from database.initialize_db import DatabaseManager
from database.users_db import UsersDatabase
from models.user import User


def create_test_user(first_name: str = "Test", last_name: str = "User", **kwargs) -> User:
    """Factory function to create test users"""
    return User(first_name=first_name, last_name=last_name, **kwargs)


@pytest.fixture
def temp_db_dir(tmp_path):
    """Per-test directory for database files"""
    db_dir = tmp_path / "data"
    db_dir.mkdir()
    return db_dir


@pytest.fixture
def feedback_messages():
    return []


@pytest.fixture
def db_manager(temp_db_dir, feedback_messages):
    """Real database manager backed by a temporary directory"""
    manager = DatabaseManager(
        user_name="test_user", base_dir=temp_db_dir, user_feedback=feedback_messages.append
    )
    manager.initialize_all_databases()
    yield manager
    manager.close()


@pytest.fixture
def users_db(db_manager):
    return UsersDatabase(db_manager)


@pytest.fixture
def sample_user():
    return User(1, "Pepe", "Botella")


@pytest.fixture
def mock_db_manager():
    """DatabaseManager double whose users_connection() yields mock_db_connection"""
    manager = MagicMock()
    connection = MagicMock()
    manager.users_connection.return_value.__enter__.return_value = connection
    manager.users_connection.return_value.__exit__.return_value = False
    manager.connection = connection
    return manager


@pytest.fixture(autouse=True)
def _reset_shared_database():
    yield
    reset_database()
