"""Tests for save_tree: leaf-first insert order and identifier propagation."""

import pytest

from todotree.errors import CycleDetectedError, MalformedNodeError, StoreWriteError
from todotree.graph.adjacency import build_adjacency
from todotree.graph.traversal import level_order
from todotree.persistence.save import leaves_first_order, save_tree
from tests.fixtures import RecordingStore, sample_payload, sample_tree, todo


def _assert_children_first(store: RecordingStore, root) -> None:
    """Every child record was inserted before every parent that references it."""
    position = {todo_id: i for i, (todo_id, _) in enumerate(store.inserted)}
    for todo_id, record in store.inserted:
        for child_id in record.sub_todos:
            assert position[child_id] < position[todo_id]


class TestScenarios:
    async def test_single_node(self, recording_store):
        """One node: exactly one insert, stored with no children."""
        todo_id = await save_tree(recording_store, todo("alone"))

        assert len(recording_store.inserted) == 1
        assert recording_store.records[todo_id].sub_todos == []
        assert recording_store.records[todo_id].description == "alone"

    async def test_root_with_two_children(self, recording_store):
        """Children go in first, root last, child order kept in the root record."""
        root = todo("root", todo("child1"), todo("child2"))
        todo_id = await save_tree(recording_store, root)

        assert recording_store.insert_order() == ["child2", "child1", "root"]
        assert recording_store.inserted[-1][0] == todo_id
        stored_root = recording_store.records[todo_id]
        assert stored_root.sub_todos == [
            recording_store.by_description("child1").todo_id,
            recording_store.by_description("child2").todo_id,
        ]

    async def test_shared_child_inserted_once(self, recording_store):
        shared = todo("shared")
        root = todo("root", todo("left", shared), todo("right", shared))
        await save_tree(recording_store, root)

        assert recording_store.insert_order().count("shared") == 1
        shared_id = recording_store.by_description("shared").todo_id
        assert recording_store.by_description("left").sub_todos == [shared_id]
        assert recording_store.by_description("right").sub_todos == [shared_id]

    async def test_saving_twice_creates_new_records(self, recording_store):
        root = sample_tree()
        first = await save_tree(recording_store, root)
        second = await save_tree(recording_store, root)

        assert first != second
        assert len(recording_store.inserted) == 10


class TestOrdering:
    async def test_children_before_parents(self, recording_store):
        root = sample_tree()
        await save_tree(recording_store, root)
        _assert_children_first(recording_store, root)
        assert recording_store.insert_order() == ["a2", "a1", "b", "a", "root"]

    async def test_one_insert_per_node_and_no_reads(self, recording_store):
        await save_tree(recording_store, sample_tree())
        assert len(recording_store.inserted) == 5
        assert recording_store.resolved == []

    async def test_same_level_cross_edge(self, recording_store):
        """root -> (b, c) with c -> b: b still has to land before c."""
        b = todo("b")
        c = todo("c", b)
        root = todo("root", b, c)
        await save_tree(recording_store, root)

        assert recording_store.insert_order() == ["b", "c", "root"]
        _assert_children_first(recording_store, root)

    def test_leaves_first_order_is_reversed_walk_for_trees(self):
        root = sample_tree()
        adjacency = build_adjacency(root)
        order = level_order(root)

        assert leaves_first_order(adjacency, order) == [4, 3, 2, 1, 0]


class TestRecords:
    async def test_fields_copied(self, recording_store):
        root = todo("root", todo("done child", done=True), is_root=True)
        todo_id = await save_tree(recording_store, root)

        assert recording_store.records[todo_id].is_root is True
        assert recording_store.by_description("done child").done is True
        assert recording_store.by_description("done child").is_root is False

    async def test_references_kept_in_position(self, recording_store):
        existing = await save_tree(recording_store, todo("existing"))
        root = todo("root", todo("first"), existing, todo("last"))
        todo_id = await save_tree(recording_store, root)

        children = recording_store.records[todo_id].sub_todos
        assert children[1] == existing
        assert recording_store.records[children[0]].description == "first"
        assert recording_store.records[children[2]].description == "last"

    async def test_caller_nodes_untouched(self, recording_store):
        child = todo("child")
        root = todo("root", child)
        await save_tree(recording_store, root)

        assert root.todo_id is None
        assert root.sub_todos == [child]
        assert root.sub_todos[0] is child

    async def test_accepts_mapping(self, recording_store):
        todo_id = await save_tree(recording_store, sample_payload())

        stored = recording_store.records[todo_id]
        assert stored.description == "plan the trip"
        assert len(stored.sub_todos) == 2
        assert len(recording_store.inserted) == 5


class TestFailures:
    async def test_insert_failure_aborts_without_rollback(self):
        store = RecordingStore(fail_on="a")
        with pytest.raises(StoreWriteError) as exc:
            await save_tree(store, sample_tree())

        assert exc.value.description == "a"
        # a2, a1 and b landed first and stay; root is never attempted
        assert store.insert_order() == ["a2", "a1", "b"]

    async def test_invalid_mapping_rejected_before_inserts(self, recording_store):
        with pytest.raises(MalformedNodeError):
            await save_tree(recording_store, {"notTodo": "not a todo"})
        assert recording_store.inserted == []

    async def test_unknown_key_rejected_before_inserts(self, recording_store):
        payload = {"description": "A", "subTodos": [{"description": "B"}]}
        with pytest.raises(MalformedNodeError):
            await save_tree(recording_store, payload)
        assert recording_store.inserted == []

    async def test_non_mapping_rejected(self, recording_store):
        with pytest.raises(MalformedNodeError):
            await save_tree(recording_store, ["not", "a", "todo"])
        assert recording_store.inserted == []

    async def test_malformed_descendant_rejected_before_inserts(self, recording_store):
        root = sample_tree()
        root.sub_todos[0].sub_todos.append(42)

        with pytest.raises(MalformedNodeError) as exc:
            await save_tree(recording_store, root)
        assert exc.value.index == 1
        assert exc.value.position == 2
        assert recording_store.inserted == []

    async def test_cycle_rejected_before_inserts(self, recording_store):
        a = todo("a")
        a.sub_todos = [todo("b", a)]

        with pytest.raises(CycleDetectedError):
            await save_tree(recording_store, todo("root", a))
        assert recording_store.inserted == []


class TestWithSqliteStore:
    async def test_saved_tree_readable(self, todo_store):
        todo_id = await save_tree(todo_store, sample_tree())

        root = await todo_store.fetch(todo_id)
        assert root.description == "root"
        a = await todo_store.fetch(root.sub_todos[0])
        b = await todo_store.fetch(root.sub_todos[1])
        assert (a.description, b.description) == ("a", "b")
        assert [(await todo_store.fetch(i)).description for i in a.sub_todos] == [
            "a1",
            "a2",
        ]
