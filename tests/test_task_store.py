import threading

import pytest

from taskdesk.exceptions import NotFoundError, ValidationError
from taskdesk.models.tasks import CreateTaskRequest, UpdateTaskRequest
from taskdesk.services.task_store import TaskStore


def _create(store, title="Buy milk", description="2%"):
    return store.create(CreateTaskRequest(title=title, description=description))


class TestCreate:
    def test_first_task_gets_id_one(self):
        task = _create(TaskStore())
        assert task.id == 1
        assert task.completed is False

    def test_ids_increase(self):
        store = TaskStore()
        ids = [_create(store).id for _ in range(3)]
        assert ids == [1, 2, 3]

    def test_empty_title_rejected(self):
        store = TaskStore()
        with pytest.raises(ValidationError):
            _create(store, title="")
        assert len(store) == 0

    def test_empty_description_rejected(self):
        store = TaskStore()
        with pytest.raises(ValidationError):
            _create(store, description="")
        assert len(store) == 0

    def test_rejected_create_does_not_consume_id(self):
        store = TaskStore()
        with pytest.raises(ValidationError):
            _create(store, title="")
        assert _create(store).id == 1

    def test_ids_not_reused_after_delete(self):
        store = TaskStore()
        _create(store)
        second = _create(store)
        store.delete(second.id)
        assert _create(store).id == 3

    def test_concurrent_creates_get_distinct_ids(self):
        store = TaskStore()
        per_thread, n_threads = 50, 8
        barrier = threading.Barrier(n_threads)

        def worker():
            barrier.wait()
            for i in range(per_thread):
                _create(store, title=f"t{i}")

        threads = [threading.Thread(target=worker) for _ in range(n_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ids = [t.id for t in store.list()]
        assert len(ids) == per_thread * n_threads
        assert len(set(ids)) == len(ids)
        assert ids == sorted(ids)
        assert set(ids) == set(range(1, per_thread * n_threads + 1))


class TestListAndGet:
    def test_empty(self):
        store = TaskStore()
        assert store.list() == []
        assert store.get(1) is None

    def test_creation_order(self):
        store = TaskStore()
        for title in ("a", "b", "c"):
            _create(store, title=title)
        assert [t.title for t in store.list()] == ["a", "b", "c"]

    def test_list_is_a_snapshot(self):
        store = TaskStore()
        _create(store)
        snapshot = store.list()
        _create(store)
        assert len(snapshot) == 1
        assert len(store.list()) == 2

    def test_count_after_creates_and_deletes(self):
        store = TaskStore()
        created = [_create(store) for _ in range(5)]
        for task in created[:2]:
            assert store.delete(task.id)
        assert len(store.list()) == 3


class TestUpdate:
    def test_partial_update_keeps_other_fields(self):
        store = TaskStore()
        task = _create(store)
        updated = store.update(task.id, UpdateTaskRequest(completed=True))
        assert updated.id == task.id
        assert updated.title == "Buy milk"
        assert updated.description == "2%"
        assert updated.completed is True
        assert store.get(task.id) == updated

    def test_empty_update_is_noop(self):
        store = TaskStore()
        task = _create(store)
        assert store.update(task.id, UpdateTaskRequest()) == task

    def test_explicit_null_keeps_value(self):
        store = TaskStore()
        task = _create(store)
        updated = store.update(task.id, UpdateTaskRequest(title=None, description="whole"))
        assert updated.title == "Buy milk"
        assert updated.description == "whole"

    def test_keeps_list_position(self):
        store = TaskStore()
        first = _create(store, title="first")
        _create(store, title="second")
        store.update(first.id, UpdateTaskRequest(title="renamed"))
        assert [t.title for t in store.list()] == ["renamed", "second"]

    def test_missing_task(self):
        with pytest.raises(NotFoundError):
            TaskStore().update(42, UpdateTaskRequest(completed=True))

    def test_missing_task_checked_before_title(self):
        with pytest.raises(NotFoundError):
            TaskStore().update(42, UpdateTaskRequest(title=""))

    def test_empty_title_rejected(self):
        store = TaskStore()
        task = _create(store)
        with pytest.raises(ValidationError):
            store.update(task.id, UpdateTaskRequest(title=""))
        assert store.get(task.id) == task


class TestDelete:
    def test_delete_existing(self):
        store = TaskStore()
        task = _create(store)
        assert store.delete(task.id) is True
        assert store.get(task.id) is None

    def test_second_delete_reports_nothing_removed(self):
        store = TaskStore()
        task = _create(store)
        store.delete(task.id)
        assert store.delete(task.id) is False

    def test_delete_missing(self):
        assert TaskStore().delete(999) is False


class TestConcurrentMutations:
    def test_readers_never_see_partial_mutations(self):
        store = TaskStore()
        initial = [_create(store, title=f"seed{i}") for i in range(40)]
        to_delete = initial[:20]
        to_update = initial[20:]
        n_new = 30

        stop = threading.Event()
        problems = []

        def reader():
            while not stop.is_set():
                ids = [t.id for t in store.list()]
                if ids != sorted(set(ids)):
                    problems.append(ids)
                for task_id in ids[:5]:
                    task = store.get(task_id)
                    if task is not None and task.id != task_id:
                        problems.append((task_id, task))

        def deleter():
            for task in to_delete:
                if not store.delete(task.id):
                    problems.append(("not deleted", task.id))

        def updater(task):
            def run():
                for _ in range(20):
                    store.update(task.id, UpdateTaskRequest(completed=True))
                store.update(task.id, UpdateTaskRequest(description=f"done {task.id}"))
            return run

        def creator():
            for i in range(n_new):
                _create(store, title=f"new{i}")

        readers = [threading.Thread(target=reader) for _ in range(4)]
        writers = [threading.Thread(target=deleter), threading.Thread(target=creator)]
        writers += [threading.Thread(target=updater(t)) for t in to_update]
        for t in readers + writers:
            t.start()
        for t in writers:
            t.join()
        stop.set()
        for t in readers:
            t.join()

        assert problems == []
        tasks = store.list()
        assert len(tasks) == len(initial) + n_new - len(to_delete)
        ids = [t.id for t in tasks]
        assert ids == sorted(set(ids))
        for task in to_update:
            current = store.get(task.id)
            assert current.completed is True
            assert current.description == f"done {task.id}"
            assert current.title == task.title
        assert all(store.get(t.id) is None for t in to_delete)
