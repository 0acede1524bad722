"""
Document-store commands

A closed set of structured operations, built by the synthesizer and run by
the MongoDB connector. Each one renders to the shell-style mini-language

    db.<collection>.<operation>(<json-args>)

with identifier references written as ``ObjectId("<hex>")``.
``parse_command`` reads that text back, rejecting anything outside the set.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List
import json
import re

from apiforge.core.errors import QuerySyntaxError


@dataclass(frozen=True)
class ObjectIdRef:
    """Reference to a store-native object identifier, by its hex string."""
    value: str


def _to_shell(value: Any) -> str:
    if isinstance(value, ObjectIdRef):
        return f"ObjectId({json.dumps(value.value)})"
    if isinstance(value, dict):
        items = ", ".join(f"{json.dumps(str(k))}: {_to_shell(v)}" for k, v in value.items())
        return "{" + items + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_to_shell(v) for v in value) + "]"
    return json.dumps(value, default=str)


@dataclass(frozen=True)
class DocumentCommand:
    collection: str
    operation = ""

    def args(self) -> List[Any]:
        return []

    def render(self) -> str:
        rendered = ", ".join(_to_shell(arg) for arg in self.args())
        return f"db.{self.collection}.{self.operation}({rendered})"

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class CreateCollection(DocumentCommand):
    operation = "createCollection"

    def render(self) -> str:
        return f"db.createCollection({json.dumps(self.collection)})"


@dataclass(frozen=True)
class Drop(DocumentCommand):
    operation = "drop"


@dataclass(frozen=True)
class Find(DocumentCommand):
    filter: Dict[str, Any] = field(default_factory=dict)
    operation = "find"

    def args(self) -> List[Any]:
        return [self.filter]


@dataclass(frozen=True)
class FindOne(DocumentCommand):
    filter: Dict[str, Any] = field(default_factory=dict)
    operation = "findOne"

    def args(self) -> List[Any]:
        return [self.filter]


@dataclass(frozen=True)
class InsertOne(DocumentCommand):
    document: Dict[str, Any] = field(default_factory=dict)
    operation = "insertOne"

    def args(self) -> List[Any]:
        return [self.document]


@dataclass(frozen=True)
class UpdateOne(DocumentCommand):
    filter: Dict[str, Any] = field(default_factory=dict)
    update: Dict[str, Any] = field(default_factory=dict)
    operation = "updateOne"

    def args(self) -> List[Any]:
        return [self.filter, self.update]


@dataclass(frozen=True)
class DeleteOne(DocumentCommand):
    filter: Dict[str, Any] = field(default_factory=dict)
    operation = "deleteOne"

    def args(self) -> List[Any]:
        return [self.filter]


# operation -> (command class, min args, max args)
_GRAMMAR = {
    "drop": (Drop, 0, 0),
    "find": (Find, 0, 1),
    "findOne": (FindOne, 1, 1),
    "insertOne": (InsertOne, 1, 1),
    "updateOne": (UpdateOne, 2, 2),
    "deleteOne": (DeleteOne, 1, 1),
}

_CREATE_COLLECTION = re.compile(r'^db\.createCollection\(\s*"([A-Za-z_][A-Za-z0-9_]*)"\s*\)$')
_COLLECTION_CALL = re.compile(r"^db\.([A-Za-z_][A-Za-z0-9_]*)\.([A-Za-z]+)\((.*)\)$", re.DOTALL)
_OBJECT_ID = re.compile(r'ObjectId\(\s*"([^"\\]*)"\s*\)')
_OID_KEY = "$__objectId"


def _restore_refs(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {_OID_KEY}:
            return ObjectIdRef(value[_OID_KEY])
        return {k: _restore_refs(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_restore_refs(v) for v in value]
    return value


def _parse_args(raw: str) -> List[Any]:
    if not raw.strip():
        return []
    as_json = _OBJECT_ID.sub(lambda m: json.dumps({_OID_KEY: m.group(1)}), raw)
    try:
        values = json.loads(f"[{as_json}]")
    except json.JSONDecodeError as e:
        raise QuerySyntaxError(f"Invalid command arguments: {e.msg}")
    return [_restore_refs(v) for v in values]


def parse_command(text: str) -> DocumentCommand:
    """
    Parse the mini-language back into a command.

    Raises:
        QuerySyntaxError: empty input, unknown operation, wrong arity or
            arguments that are not JSON objects
    """
    if not text or not text.strip():
        raise QuerySyntaxError("Empty document command")
    text = text.strip()

    match = _CREATE_COLLECTION.match(text)
    if match:
        return CreateCollection(match.group(1))

    match = _COLLECTION_CALL.match(text)
    if not match:
        raise QuerySyntaxError(f"Unrecognized document command: {text}")

    collection, operation, raw_args = match.groups()
    if operation not in _GRAMMAR:
        raise QuerySyntaxError(f"Unsupported document operation: {operation}")

    command_class, min_args, max_args = _GRAMMAR[operation]
    args = _parse_args(raw_args)
    if not min_args <= len(args) <= max_args:
        raise QuerySyntaxError(f"{operation} takes {min_args}-{max_args} arguments, got {len(args)}")
    if not all(isinstance(arg, dict) for arg in args):
        raise QuerySyntaxError(f"{operation} arguments must be objects")

    return command_class(collection, *args)
