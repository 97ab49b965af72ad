"""On-disk Avro schema store.

Schemas live one per file under a root directory, laid out by namespace:
`com.example.Order` is read from `<root>/com/example/Order.avsc`. A file may
refer to named types defined in other files before those files were loaded;
the store loads the missing file first and parses the original again.

Only schemas that have their own file are committed to the store. Named types
nested inside a file stay private to the schema that defines them, so two
files can each define an unrelated nested record with the same name.
"""

from __future__ import annotations

import errno
import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

import fastavro
from fastavro.schema import SchemaParseException, UnknownType

from ..exceptions import (
    SchemaError,
    SchemaFileNotFoundError,
    SchemaMismatchError,
    UnresolvableSchemaError,
)

logger = logging.getLogger(__name__)

SCHEMA_FILE_SUFFIX = ".avsc"
MAX_RESOLUTION_DEPTH = 64


@dataclass(frozen=True)
class Resolved:
    """A schema file parsed completely."""

    schema: Any
    text: str


@dataclass(frozen=True)
class NeedsDependency:
    """A schema file that refers to a named type not loaded yet."""

    name: str


ParseOutcome = Union[Resolved, NeedsDependency]


@dataclass
class _LoadContext:
    """Named types visible to the parser during one find() call.

    Owned by the find() call that created it; nested loads share it and the
    parser adds every named type it meets to `named`.
    """

    named: dict[str, Any]
    pending: list[str] = field(default_factory=list)
    committed: list[str] = field(default_factory=list)


def _fullname(definition: Mapping[str, Any]) -> str:
    name = definition.get("name")
    if not name:
        raise SchemaError("Avro schema definition has no name")
    namespace = definition.get("namespace")
    if "." in name or not namespace:
        return str(name)
    return f"{namespace}.{name}"


PRIMITIVE_TYPES = frozenset(
    {"null", "boolean", "int", "long", "float", "double", "bytes", "string"}
)
NAMED_TYPES = frozenset({"record", "error", "enum", "fixed"})


def _walk_named_types(schema: Any, defined: dict[str, Any], referenced: list[str]) -> None:
    if isinstance(schema, str):
        if schema not in PRIMITIVE_TYPES and schema not in referenced:
            referenced.append(schema)
    elif isinstance(schema, list):
        for branch in schema:
            _walk_named_types(branch, defined, referenced)
    elif isinstance(schema, dict):
        schema_type = schema.get("type")
        if schema_type in NAMED_TYPES:
            defined[schema["name"]] = schema
            for schema_field in schema.get("fields", ()):
                _walk_named_types(schema_field.get("type"), defined, referenced)
        elif schema_type == "array":
            _walk_named_types(schema.get("items"), defined, referenced)
        elif schema_type == "map":
            _walk_named_types(schema.get("values"), defined, referenced)
        else:
            _walk_named_types(schema_type, defined, referenced)


def named_closure(schema: Any, named: Mapping[str, Any]) -> dict[str, Any]:
    """Return the named types a parsed schema can reach, keyed by fullname.

    Only types the schema refers to are followed. A committed dependency
    contributes the closure it was committed with; anything else found in
    `named` is walked in turn. Types the schema defines and the dependencies
    it names directly take precedence over types picked up further down, so a
    nested type of the same name in an unrelated file never shadows the one
    actually used.
    """
    defined: dict[str, Any] = {}
    referenced: list[str] = []
    _walk_named_types(schema, defined, referenced)

    direct = [name for name in referenced if name not in defined]
    reachable: dict[str, Any] = {}
    pending = list(direct)
    seen = set(pending)
    while pending:
        dependency = named.get(pending.pop(0))
        if not isinstance(dependency, dict):
            continue
        closure = dependency.get("__named_schemas")
        if isinstance(closure, dict):
            for key, value in closure.items():
                reachable.setdefault(key, value)
            continue

        nested: dict[str, Any] = {}
        further: list[str] = []
        _walk_named_types(dependency, nested, further)
        for key, value in nested.items():
            reachable.setdefault(key, value)
        for name in further:
            if name not in seen and name not in nested:
                seen.add(name)
                pending.append(name)

    for name in direct:
        if name in named:
            reachable[name] = named[name]
    reachable.update(defined)
    return reachable


class AvroSchemaStore:
    """Resolves fully-qualified Avro names to parsed schemas.

    Reads are lock-free. Loading takes a single lock, checks again, and parses
    the file and anything it depends on.

    Args:
        path: Root directory of the .avsc files

    Raises:
        ValueError: If path is empty

    Example:
        >>> store = AvroSchemaStore(path="schemas")
        >>> schema = store.find("simple.v1.SimpleMessage")
        >>> text = store.find_text("simple.v1.SimpleMessage")
    """

    def __init__(self, path: Union[str, Path]) -> None:
        if not path:
            raise ValueError("path must point at the Avro schema directory")
        self.path = Path(path)
        self._schemas: dict[str, Any] = {}
        self._texts: dict[str, str] = {}
        self._lock = threading.Lock()

    @property
    def schemas(self) -> Mapping[str, Any]:
        """Read-only view of the committed schemas by fullname."""
        return MappingProxyType(self._schemas)

    def find(self, name: str) -> Any:
        """Return the parsed schema for a fully-qualified name.

        Raises:
            SchemaFileNotFoundError: If the file (or a referenced file) is missing
            SchemaMismatchError: If a file declares a different name than its path
            UnresolvableSchemaError: If references can never be resolved
            SchemaError: If a file is not a valid Avro schema
        """
        schema = self._schemas.get(name)
        if schema is not None:
            return schema

        with self._lock:
            schema = self._schemas.get(name)
            if schema is not None:
                return schema
            context = _LoadContext(named=dict(self._schemas))
            schema = self._load(name, context)
            self._relink(context.committed)
            return schema

    def find_text(self, name: str) -> Optional[str]:
        """Return the raw text of a committed schema, or None if not loaded."""
        return self._texts.get(name)

    def load_schemas(self) -> None:
        """Load every .avsc file under the root directory."""
        for schema_path in sorted(self.path.rglob(f"*{SCHEMA_FILE_SUFFIX}")):
            relative = schema_path.relative_to(self.path).with_suffix("")
            self.find(".".join(relative.parts))

    def add_schema(self, definition: Mapping[str, Any]) -> Any:
        """Commit an already-materialized schema definition.

        The definition may only refer to named types already in the store.
        Nothing is parsed if its fullname is already present.

        Returns:
            The parsed schema under the definition's fullname
        """
        fullname = _fullname(definition)
        if fullname in self._schemas:
            return self._schemas[fullname]

        with self._lock:
            if fullname in self._schemas:
                return self._schemas[fullname]

            named = dict(self._schemas)
            try:
                schema = fastavro.parse_schema(dict(definition), named_schemas=named)
            except UnknownType as err:
                raise UnresolvableSchemaError(
                    f"Schema {fullname} refers to {err.name}, which is not in the store"
                ) from err
            except SchemaParseException as err:
                raise SchemaError(f"Invalid Avro schema {fullname}: {err}") from err

            return self._commit(fullname, Resolved(schema, json.dumps(definition, indent=2)), named)

    def schema_path(self, name: str) -> Path:
        """Return the file a fully-qualified name is loaded from."""
        *namespace, schema_name = name.split(".")
        return self.path.joinpath(*namespace, f"{schema_name}{SCHEMA_FILE_SUFFIX}")

    def _load(self, name: str, context: _LoadContext) -> Any:
        if len(context.pending) >= MAX_RESOLUTION_DEPTH:
            raise UnresolvableSchemaError(
                f"Schema references nested deeper than {MAX_RESOLUTION_DEPTH}: "
                f"{' -> '.join(context.pending)}"
            )

        context.pending.append(name)
        try:
            resolved: set[str] = set()
            while True:
                outcome = self._parse_file(name, context.named)
                if isinstance(outcome, Resolved):
                    context.committed.append(name)
                    return self._commit(name, outcome, context.named)

                dependency = outcome.name
                if dependency in context.pending:
                    raise UnresolvableSchemaError(
                        f"Circular reference while loading {name}: "
                        f"{' -> '.join(context.pending)} -> {dependency}"
                    )
                if dependency in resolved:
                    raise UnresolvableSchemaError(
                        f"{name} still refers to unknown type {dependency} after loading it"
                    )

                logger.debug(
                    "Resolving forward reference.",
                    extra={"schema": name, "dependency": dependency},
                )
                self._load(dependency, context)
                resolved.add(dependency)

                # Parse the current file again from scratch. Named types left
                # behind by the failed attempt have no file of their own.
                context.named.pop(name, None)
                surviving = {
                    key: value
                    for key, value in context.named.items()
                    if self.schema_path(key).is_file()
                }
                context.named.clear()
                context.named.update(surviving)
                context.named.update(self._schemas)
        finally:
            context.pending.pop()

    def _parse_file(self, name: str, named: dict[str, Any]) -> ParseOutcome:
        path = self.schema_path(name)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as err:
            raise SchemaFileNotFoundError(name, path) from err
        except OSError as err:
            if err.errno == errno.ENAMETOOLONG:
                raise SchemaFileNotFoundError(name, path) from err
            raise

        try:
            definition = json.loads(text)
        except json.JSONDecodeError as err:
            raise SchemaError(f"Invalid JSON in Avro schema {path}: {err}") from err

        try:
            schema = fastavro.parse_schema(definition, named_schemas=named)
        except UnknownType as err:
            return NeedsDependency(err.name)
        except SchemaParseException as err:
            raise SchemaError(f"Invalid Avro schema {path}: {err}") from err

        declared = schema.get("name") if isinstance(schema, dict) else None
        if declared is not None and declared != name:
            raise SchemaMismatchError(name, declared, path)

        return Resolved(schema, text)

    def _commit(self, name: str, outcome: Resolved, named: Mapping[str, Any]) -> Any:
        schema = outcome.schema
        if isinstance(schema, dict):
            schema = dict(schema)
            schema["__named_schemas"] = named_closure(outcome.schema, {**named, **self._schemas})

        self._schemas[name] = schema
        self._texts[name] = outcome.text
        return schema

    def _relink(self, names: list[str]) -> None:
        # A dependency of a recursive schema was parsed while its parent was
        # only half built; point it at the committed parent instead.
        for name in names:
            schema = self._schemas[name]
            closure = schema.get("__named_schemas") if isinstance(schema, dict) else None
            if not isinstance(closure, dict):
                continue
            for key in closure:
                committed = self._schemas.get(key)
                if committed is not None and key != name:
                    closure[key] = committed
