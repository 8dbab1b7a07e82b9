"""Tests for the operation queue and the Database builder surface."""

import pytest

from ddlflow.common.exceptions import DDLFlowError, ErrorCode
from ddlflow.constants.sql import Modifier, OperationKind, SqlType
from ddlflow.operations import (
    Database,
    Insert,
    OperationQueue,
    PrimaryKeyConstraint,
    SqlStatement,
    Table,
)


class TestOperationQueue:
    """FIFO order, tombstone removal and identity semantics."""

    def test_dequeue_in_enqueue_order(self):
        queue = OperationQueue()
        first = SqlStatement(sql="SELECT 1")
        second = SqlStatement(sql="SELECT 2")
        queue.enqueue(first)
        queue.enqueue(second)

        assert queue.dequeue_next() is first
        assert queue.dequeue_next() is second
        assert queue.dequeue_next() is None

    def test_empty_queue_returns_none(self):
        assert OperationQueue().dequeue_next() is None

    def test_removed_operation_is_skipped(self):
        queue = OperationQueue()
        ops = [SqlStatement(sql=f"SELECT {i}") for i in range(3)]
        for op in ops:
            queue.enqueue(op)

        assert queue.remove(ops[1]) is True
        assert queue.dequeue_next() is ops[0]
        assert queue.dequeue_next() is ops[2]
        assert queue.dequeue_next() is None
        assert queue.removed() == [ops[1]]

    def test_remove_uses_identity_not_equality(self):
        """Two structurally equal operations are still distinct entries."""
        queue = OperationQueue()
        a = SqlStatement(sql="SELECT 1")
        b = SqlStatement(sql="SELECT 1")
        assert a == b
        queue.enqueue(a)
        queue.enqueue(b)

        assert queue.remove(b) is True
        assert queue.is_pending(a)
        assert not queue.is_pending(b)
        assert queue.dequeue_next() is a
        assert queue.dequeue_next() is None

    def test_remove_after_consumption_is_noop(self):
        queue = OperationQueue()
        op = SqlStatement(sql="SELECT 1")
        queue.enqueue(op)
        queue.dequeue_next()

        assert queue.remove(op) is False
        assert queue.consumed() == [op]

    def test_remove_unknown_operation(self):
        assert OperationQueue().remove(SqlStatement(sql="SELECT 1")) is False

    def test_remove_twice(self):
        queue = OperationQueue()
        op = SqlStatement(sql="SELECT 1")
        queue.enqueue(op)
        assert queue.remove(op) is True
        assert queue.remove(op) is False

    def test_enqueue_same_object_twice_fails(self):
        queue = OperationQueue()
        op = SqlStatement(sql="SELECT 1")
        queue.enqueue(op)

        with pytest.raises(DDLFlowError) as exc_info:
            queue.enqueue(op)
        assert exc_info.value.error_code == ErrorCode.DUPLICATE_OPERATION

    def test_len_counts_pending_only(self):
        queue = OperationQueue()
        ops = [SqlStatement(sql=f"SELECT {i}") for i in range(3)]
        for op in ops:
            queue.enqueue(op)
        queue.remove(ops[2])
        queue.dequeue_next()

        assert len(queue) == 1
        assert bool(queue)
        assert queue.pending() == [ops[1]]
        assert "pending=1" in repr(queue)


class TestDatabaseBuilder:
    """Builder methods enqueue operations in call order."""

    def test_table_declaration_enqueues_in_order(self, db):
        users = db.add_table("Users")
        users.add_column("Id", SqlType.INT, nullable=False)
        pk = users.add_primary_key("Id")
        row = users.insert(Id=1)

        assert db.queue.pending() == [users, pk, row]
        assert users.database is db
        assert pk.database is db
        assert isinstance(row, Insert)

    def test_add_table_modifiers(self, db):
        assert db.add_table("A").modifier == Modifier.ADD
        assert db.alter_table("A").modifier == Modifier.ALTER
        assert db.drop_table("A").modifier == Modifier.DROP

    def test_get_table_returns_latest_declaration(self, db):
        db.add_table("Users")
        altered = db.alter_table("Users")
        assert db.get_table("Users") is altered
        assert db.get_table("Missing") is None
        assert len(db.tables) == 2

    def test_primary_key_is_recorded_on_table(self, db):
        users = db.add_table("Users")
        users.add_column("Id", SqlType.INT)
        pk = users.add_primary_key("Id", name="PK_Custom")

        assert isinstance(pk, PrimaryKeyConstraint)
        assert users.primary_key is pk
        assert pk.kind == OperationKind.PRIMARY_KEY
        assert db.has_primary_key("Users")

    def test_second_primary_key_is_rejected(self, db):
        users = db.add_table("Users")
        users.add_column("Id", SqlType.INT)
        users.add_primary_key("Id")

        with pytest.raises(DDLFlowError) as exc_info:
            users.add_primary_key("Name")
        assert exc_info.value.error_code == ErrorCode.DUPLICATE_OPERATION

    def test_primary_key_across_declarations_is_rejected(self, db):
        db.add_table("Users").add_primary_key("Id")
        with pytest.raises(DDLFlowError):
            db.alter_table("Users").add_primary_key("Id")

    def test_duplicate_column_on_new_table(self, db):
        users = db.add_table("Users")
        users.add_column("Id", SqlType.INT)
        with pytest.raises(DDLFlowError) as exc_info:
            users.add_column("Id", SqlType.BIGINT)
        assert exc_info.value.error_code == ErrorCode.DUPLICATE_OPERATION

    def test_alter_column_requires_alter_table(self, db):
        with pytest.raises(DDLFlowError):
            db.add_table("Users").alter_column("Id", new_name="UserId")

    def test_alter_column_requires_change(self, db):
        with pytest.raises(DDLFlowError):
            db.alter_table("Users").alter_column("Id")

    def test_drop_table_rejects_columns(self, db):
        with pytest.raises(DDLFlowError):
            db.drop_table("Users").add_column("Id", SqlType.INT)

    def test_detached_table_cannot_add_constraints(self):
        table = Table(name="Users")
        with pytest.raises(DDLFlowError):
            table.add_primary_key("Id")

    def test_insert_keeps_column_order(self, db):
        row = db.insert("Users", {"Name": "x", "Id": 2}, Active=True)
        assert list(row.row) == ["Name", "Id", "Active"]

    def test_insert_requires_values(self, db):
        with pytest.raises(ValueError):
            db.insert("Users")

    def test_foreign_key_requires_matching_columns(self, db):
        orders = db.add_table("Orders")
        with pytest.raises(ValueError):
            orders.add_foreign_key(["UserId", "TenantId"], "Users", ["Id"])

    def test_telemetry_fields(self, db):
        users = db.add_table("Users")
        assert users.telemetry_fields() == {
            "operation.kind": "TABLE",
            "operation.modifier": "ADD",
            "operation.target": "Users",
        }
