"""
Tests for UserController against a real SQLite store and against doubles.
"""

import threading
import time
from unittest.mock import MagicMock

import pytest

from controllers.user_controller import UserController
from database.initialize_db import DatabaseManager
from database.users_db import UsersDatabase, UserStoreError
from models.user import User

TIMEOUT = 5


@pytest.fixture
def db_manager(tmp_path):
    manager = DatabaseManager(user_name="controller", base_dir=tmp_path)
    manager.initialize_all_databases()
    yield manager
    manager.close()


@pytest.fixture
def store(db_manager):
    return UsersDatabase(db_manager)


@pytest.fixture
def controller(store):
    c = UserController(store=store, autoload=False)
    yield c
    c.close()


class TestUserControllerCommands:
    def test_initial_state(self, controller):
        assert controller.users.value == []
        assert controller.error.value is None

    def test_autoload_on_construction(self, store):
        store.insert_all(User(1, "Pepe", "Botella"))
        c = UserController(store=store)
        try:
            c.load_users().result(TIMEOUT)
            assert c.users.value == [User(1, "Pepe", "Botella")]
        finally:
            c.close()

    def test_add_user_reloads_from_store(self, controller):
        result = controller.add_user("A", "B").result(TIMEOUT)

        names = [(u.first_name, u.last_name) for u in controller.users.value]
        assert names == [("A", "B")]
        assert result == controller.users.value
        assert controller.users.value[0].uid is not None

    def test_delete_user(self, controller, store):
        store.insert_all(User(1, "Pepe", "Botella"), User(2, "el diablo", "mami"))
        controller.load_users().result(TIMEOUT)

        controller.delete_user(User(1, "Pepe", "Botella")).result(TIMEOUT)

        assert controller.users.value == [User(2, "el diablo", "mami")]
        assert all(u.uid != 1 for u in store.get_all())

    def test_delete_missing_user_is_not_an_error(self, controller):
        controller.delete_user(User(404, "No", "One")).result(TIMEOUT)
        assert controller.error.value is None

    def test_seed_then_add_scenario(self, controller, store):
        store.insert_all(User(1, "Pepe", "Botella"))
        controller.load_users().result(TIMEOUT)
        assert controller.users.value == [User(1, "Pepe", "Botella")]

        controller.add_user("el diablo", "mami").result(TIMEOUT)

        users = store.get_all()
        assert [u.display_name for u in users] == ["Pepe Botella", "el diablo mami"]
        assert controller.users.value == users

    def test_subscribers_see_each_refresh(self, controller):
        snapshots = []
        controller.users.subscribe(lambda users: snapshots.append(len(users)))

        controller.add_user("A", "B").result(TIMEOUT)
        controller.add_user("C", "D").result(TIMEOUT)

        assert snapshots == [0, 1, 2]

    def test_operations_are_serialized(self, controller):
        futures = [controller.add_user(f"first{i}", f"last{i}") for i in range(10)]
        for future in futures:
            future.result(TIMEOUT)

        # Each add's trailing reload sees its own insert and every earlier one
        assert [len(f.result()) for f in futures] == list(range(1, 11))
        assert len(controller.users.value) == 10


class TestUserControllerErrors:
    def _failing_store(self, **failures):
        store = MagicMock(spec=UsersDatabase)
        store.get_all.return_value = []
        for name, exc in failures.items():
            getattr(store, name).side_effect = exc
        return store

    def test_store_failure_published_as_error(self):
        cause = UserStoreError("insert users", OSError("disk full"))
        c = UserController(store=self._failing_store(insert_all=cause), autoload=False)
        try:
            with pytest.raises(UserStoreError):
                c.add_user("A", "B").result(TIMEOUT)
            assert c.error.value == str(cause)
            assert c.users.value == []
        finally:
            c.close()

    def test_unexpected_failure_message(self):
        c = UserController(
            store=self._failing_store(get_all=RuntimeError("locked")), autoload=False
        )
        try:
            with pytest.raises(RuntimeError):
                c.load_users().result(TIMEOUT)
            assert c.error.value == "Could not load users: locked"
        finally:
            c.close()

    def test_success_clears_error(self):
        store = self._failing_store()
        store.get_all.side_effect = [RuntimeError("busy"), [User(1, "A", "B")]]
        c = UserController(store=store, autoload=False)
        try:
            with pytest.raises(RuntimeError):
                c.load_users().result(TIMEOUT)
            assert c.error.value is not None

            c.load_users().result(TIMEOUT)
            assert c.error.value is None
            assert c.users.value == [User(1, "A", "B")]
        finally:
            c.close()

    def test_clear_error(self):
        c = UserController(store=self._failing_store(), autoload=False)
        try:
            c.error.set("something")
            c.clear_error()
            assert c.error.value is None
        finally:
            c.close()


class TestUserControllerLifecycle:
    def test_close_rejects_new_commands(self, store):
        c = UserController(store=store, autoload=False)
        c.close()

        assert c.is_closed
        with pytest.raises(RuntimeError, match="closed"):
            c.load_users()

    def test_close_cancels_pending_operations(self):
        release = threading.Event()
        entered = threading.Event()
        store = MagicMock(spec=UsersDatabase)

        def slow_get_all():
            entered.set()
            release.wait(TIMEOUT)
            return []

        store.get_all.side_effect = slow_get_all
        c = UserController(store=store, autoload=False)

        first = c.load_users()
        queued = c.add_user("A", "B")
        assert entered.wait(TIMEOUT)

        start = time.monotonic()
        # Unblock the worker thread only after close() has cancelled the tasks
        timer = threading.Timer(0.2, release.set)
        timer.start()
        c.close()
        timer.join()

        assert queued.cancelled() or queued.done()
        assert first.done()
        assert time.monotonic() - start < TIMEOUT
        store.insert_all.assert_not_called()

    def test_uses_shared_database_when_no_store_given(self, tmp_path, monkeypatch):
        from database import factory

        manager = DatabaseManager(user_name="shared", base_dir=tmp_path)
        manager.initialize_all_databases()
        monkeypatch.setattr(factory, "get_database", lambda: manager)
        monkeypatch.setattr("controllers.user_controller.get_database", lambda: manager)

        c = UserController(autoload=False)
        try:
            c.add_user("X", "Y").result(TIMEOUT)
            assert UsersDatabase(manager).get_all()[0].display_name == "X Y"
        finally:
            c.close()
