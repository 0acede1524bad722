"""
Tests for query synthesis
"""
import uuid

import pytest

from apiforge.core.errors import ConfigurationError, ValidationError
from apiforge.models import ColumnDefinition
from apiforge.query.document_commands import (
    CreateCollection, DeleteOne, Drop, Find, FindOne, InsertOne, ObjectIdRef, UpdateOne
)
from apiforge.query.plan import Operation, SqlStatement
from apiforge.schemas.table import ColumnCreate
from apiforge.services import query_synthesizer
from apiforge.services.query_synthesizer import synthesize


def column(name, data_type="string", is_nullable=True, default_value=None, is_identifier=False):
    return ColumnDefinition(
        name=name,
        data_type=data_type,
        is_nullable=is_nullable,
        default_value=default_value,
        is_identifier=is_identifier
    )


TABLE_COLUMNS = [
    column("id", "number", is_nullable=False, is_identifier=True),
    column("title", is_nullable=False),
    column("priority", "number"),
]
RECORD_UUID = "0b7e2a5c-6f1d-4c1e-9a3b-2f8d4e6c1a90"


class TestRelationalCreate:
    """Inserts and how the inserted row comes back"""

    @pytest.mark.parametrize("dialect", ["mysql", "postgresql"])
    def test_sequence_id_excluded_from_insert(self, dialect):
        plan = synthesize(dialect, "todo", TABLE_COLUMNS, "auto_increment", Operation.CREATE,
                          payload={"id": 99, "title": "buy milk", "priority": 2})

        assert plan.primary.text.startswith("INSERT INTO todo (title, priority) VALUES (:title, :priority)")
        assert plan.primary.params == {"title": "buy milk", "priority": 2}

    def test_follow_up_without_returning(self):
        plan = synthesize("mysql", "todo", TABLE_COLUMNS, "auto_increment", "create",
                          payload={"title": "buy milk", "priority": 2})

        assert "RETURNING" not in plan.primary.text
        assert plan.follow_up == SqlStatement("SELECT * FROM todo WHERE id = LAST_INSERT_ID()")

    def test_no_follow_up_with_returning(self):
        plan = synthesize("postgresql", "todo", TABLE_COLUMNS, "auto_increment", "create",
                          payload={"title": "buy milk", "priority": 2})

        assert plan.primary.text.endswith(" RETURNING *")
        assert plan.follow_up is None

    @pytest.mark.parametrize("dialect, follow_ups", [("postgresql", 0), ("mysql", 1)])
    def test_generated_uuid_is_bound(self, dialect, follow_ups):
        columns = [column("id", is_nullable=False, is_identifier=True), column("title", is_nullable=False)]
        plan = synthesize(dialect, "todo", columns, "uuid", "create", payload={"title": "buy milk"})

        generated = plan.primary.params["id"]
        assert str(uuid.UUID(generated)) == generated
        assert f"'{generated}'" in plan.primary.render()
        assert (plan.follow_up is not None) == bool(follow_ups)
        if plan.follow_up is not None:
            assert plan.follow_up.params == {"id": generated}

    def test_unknown_payload_keys_ignored(self):
        plan = synthesize("postgresql", "todo", TABLE_COLUMNS, "auto_increment", "create",
                          payload={"title": "x", "owner": "eve"})
        assert plan.primary.params == {"title": "x"}

    @pytest.mark.parametrize("payload", [None, {}, {"id": 1}, {"unknown": "x"}])
    def test_empty_payload_rejected(self, payload):
        with pytest.raises(ValidationError) as exc_info:
            synthesize("mysql", "todo", TABLE_COLUMNS, "auto_increment", "create", payload=payload)
        assert exc_info.value.message == "No valid columns to insert"

    def test_nested_value_rejected(self):
        with pytest.raises(ValidationError):
            synthesize("mysql", "todo", TABLE_COLUMNS, "auto_increment", "create",
                       payload={"title": {"$gt": ""}})

    def test_values_never_inlined_in_template(self):
        plan = synthesize("postgresql", "todo", TABLE_COLUMNS, "auto_increment", "create",
                          payload={"title": "x'); DROP TABLE todo; --"})

        assert "DROP" not in plan.primary.text
        assert "'x''); DROP TABLE todo; --'" in plan.primary.render()


class TestRelationalReadWrite:
    """List, get, update and delete statements"""

    def test_list(self):
        plan = synthesize("mysql", "todo", TABLE_COLUMNS, "auto_increment", "list")
        assert plan.primary.render() == "SELECT * FROM todo"

    def test_get_by_uuid(self):
        plan = synthesize("postgresql", "todo", TABLE_COLUMNS, "uuid", "get", record_id=RECORD_UUID)
        assert plan.primary.text == "SELECT * FROM todo WHERE id = :id"
        assert plan.primary.render() == f"SELECT * FROM todo WHERE id = '{RECORD_UUID}'"

    def test_delete_by_sequence_id_is_unquoted(self):
        plan = synthesize("mysql", "todo", TABLE_COLUMNS, "auto_increment", "delete", record_id="7")

        assert plan.primary.params == {"id": 7}
        assert plan.primary.render() == "DELETE FROM todo WHERE id = 7"
        assert plan.follow_up is None

    def test_update(self):
        plan = synthesize("postgresql", "todo", TABLE_COLUMNS, "auto_increment", "update",
                          record_id=3, payload={"priority": 5})

        assert plan.primary.text == "UPDATE todo SET priority = :priority WHERE id = :id"
        assert plan.primary.params == {"priority": 5, "id": 3}

    def test_update_without_values(self):
        with pytest.raises(ValidationError) as exc_info:
            synthesize("postgresql", "todo", TABLE_COLUMNS, "auto_increment", "update",
                       record_id=3, payload={"id": 4})
        assert exc_info.value.message == "No valid columns to update"

    def test_malformed_uuid_rejected_before_execution(self):
        with pytest.raises(ValidationError):
            synthesize("postgresql", "todo", TABLE_COLUMNS, "uuid", "delete", record_id="not-a-uuid")
        plan = synthesize("mysql", "todo", TABLE_COLUMNS, "uuid", "delete", record_id="not-a-uuid")
        assert plan.primary.params == {"id": "not-a-uuid"}

    def test_bad_sequence_id(self):
        with pytest.raises(ValidationError):
            synthesize("mysql", "todo", TABLE_COLUMNS, "auto_increment", "get", record_id="seven")

    def test_invalid_table_name(self):
        with pytest.raises(ValidationError):
            synthesize("mysql", "todo; DROP TABLE x", TABLE_COLUMNS, "auto_increment", "list")

    def test_unsupported_dialect(self):
        with pytest.raises(ConfigurationError):
            synthesize("sqlite", "todo", TABLE_COLUMNS, "auto_increment", "list")

    def test_object_id_on_relational(self):
        with pytest.raises(ConfigurationError):
            synthesize("postgresql", "todo", TABLE_COLUMNS, "mongodb_id", "list")


class TestDocumentCommands:
    """Document-store plans are structured commands"""

    def test_get_by_object_id(self):
        plan = synthesize("mongodb", "todo", TABLE_COLUMNS, "uuid", "get", record_id="abc-123")

        assert plan.primary == FindOne("todo", {"_id": ObjectIdRef("abc-123")})
        assert 'ObjectId("abc-123")' in plan.primary.render()

    def test_get_by_sequence_id(self):
        plan = synthesize("mongodb", "todo", TABLE_COLUMNS, "auto_increment", "get", record_id=42)

        assert plan.primary.render() == 'db.todo.findOne({"_id": 42})'
        assert "ObjectId" not in plan.primary.render()

    def test_list(self):
        plan = synthesize("mongodb", "todo", TABLE_COLUMNS, "mongodb_id", "list")
        assert plan.primary == Find("todo", {})
        assert plan.is_document

    def test_create(self):
        plan = synthesize("mongodb", "todo", TABLE_COLUMNS, "mongodb_id", "create",
                          payload={"_id": "x", "title": "buy milk"})
        assert plan.primary == InsertOne("todo", {"title": "buy milk"})
        assert plan.follow_up is None

    def test_update(self):
        plan = synthesize("mongodb", "todo", TABLE_COLUMNS, "mongodb_id", "update",
                          record_id="65a1b2c3d4e5f6a7b8c9d0e1", payload={"title": "done"})
        assert plan.primary == UpdateOne(
            "todo", {"_id": ObjectIdRef("65a1b2c3d4e5f6a7b8c9d0e1")}, {"$set": {"title": "done"}}
        )

    def test_delete(self):
        plan = synthesize("mongodb", "todo", TABLE_COLUMNS, "mongodb_id", "delete", record_id="abc")
        assert plan.primary == DeleteOne("todo", {"_id": ObjectIdRef("abc")})

    def test_empty_create_rejected(self):
        with pytest.raises(ValidationError):
            synthesize("mongodb", "todo", TABLE_COLUMNS, "mongodb_id", "create", payload={})


class TestSchemaStatements:
    """CREATE, DROP and ALTER"""

    def test_create_todo_with_uuid(self):
        columns = [ColumnCreate(name="title", data_type="string", is_nullable=False)]

        mysql = query_synthesizer.create_table("mysql", "todo", columns, "uuid")
        postgres = query_synthesizer.create_table("postgresql", "todo", columns, "uuid")

        assert mysql.text == "CREATE TABLE todo (id CHAR(36) PRIMARY KEY, title VARCHAR(255) NOT NULL)"
        assert postgres.text == (
            "CREATE TABLE todo (id UUID PRIMARY KEY DEFAULT gen_random_uuid(), title TEXT NOT NULL)"
        )

    def test_create_with_defaults(self):
        columns = [
            ColumnCreate(name="title", data_type="string", default_value="untitled"),
            ColumnCreate(name="done", data_type="boolean", is_nullable=False, default_value="0"),
        ]
        statement = query_synthesizer.create_table("postgresql", "task", columns, "auto_increment")

        assert statement.text == (
            "CREATE TABLE task (id SERIAL PRIMARY KEY, title TEXT DEFAULT 'untitled', "
            "done BOOLEAN NOT NULL DEFAULT FALSE)"
        )

    def test_create_collection(self):
        statement = query_synthesizer.create_table("mongodb", "todo", [], "mongodb_id")
        assert statement == CreateCollection("todo")
        assert statement.render() == 'db.createCollection("todo")'

    def test_drop(self):
        assert query_synthesizer.drop_table("mysql", "todo").text == "DROP TABLE todo"
        assert query_synthesizer.drop_table("mongodb", "todo") == Drop("todo")

    def test_alter_rename_add_drop(self):
        current = [column("id", "number", is_identifier=True), column("title"), column("notes")]
        wanted = [
            ColumnCreate(name="title", data_type="string"),
            ColumnCreate(name="due", data_type="date"),
        ]
        statements = query_synthesizer.alter_table("mysql", "todo", current, "task", wanted)

        assert [s.text for s in statements] == [
            "ALTER TABLE todo RENAME TO task",
            "ALTER TABLE task ADD COLUMN due DATETIME",
            "ALTER TABLE task DROP COLUMN notes",
        ]

    def test_alter_modify_mysql(self):
        current = [column("title")]
        wanted = [ColumnCreate(name="title", data_type="string", is_nullable=False)]
        statements = query_synthesizer.alter_table("mysql", "todo", current, "todo", wanted)

        assert [s.text for s in statements] == [
            "ALTER TABLE todo MODIFY COLUMN title VARCHAR(255) NOT NULL"
        ]

    def test_alter_modify_postgres(self):
        current = [column("priority", "string", default_value="low")]
        wanted = [ColumnCreate(name="priority", data_type="number", is_nullable=False)]
        statements = query_synthesizer.alter_table("postgresql", "todo", current, "todo", wanted)

        assert [s.text for s in statements] == [
            "ALTER TABLE todo ALTER COLUMN priority TYPE INTEGER",
            "ALTER TABLE todo ALTER COLUMN priority SET NOT NULL",
            "ALTER TABLE todo ALTER COLUMN priority DROP DEFAULT",
        ]

    def test_alter_unchanged(self):
        current = [column("title", is_nullable=False)]
        wanted = [ColumnCreate(name="title", data_type="string", is_nullable=False)]
        assert query_synthesizer.alter_table("postgresql", "todo", current, "todo", wanted) == []

    def test_alter_collection_is_noop(self):
        assert query_synthesizer.alter_table("mongodb", "todo", [], "tasks", []) == []
