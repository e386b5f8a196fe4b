"""
JSON Schema validation gate for site-config submissions.

The schema file is the source of truth and may be edited while the server
runs. The compiled validator is cached per file and rebuilt only when the
file's modification time or size changes.
"""
import json
import os
import threading
from typing import Any, Dict, Iterable, List, Optional, Tuple

from jsonschema import Draft202012Validator, FormatChecker

from core.config import logger
from core.errors import BadRequest


def load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _pointer(parts: Iterable[Any]) -> str:
    """JSON pointer for an instance location ('' is the document root)."""
    out = ""
    for p in parts:
        out += "/" + str(p).replace("~", "~0").replace("/", "~1")
    return out


def compile_schema(schema: Dict[str, Any]) -> Draft202012Validator:
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema, format_checker=FormatChecker())


def collect_errors(validator: Draft202012Validator, document: Any) -> List[Dict[str, str]]:
    """Every violation as {path, message, keyword}, ordered by path."""
    errors = []
    for err in validator.iter_errors(document):
        errors.append({
            "path": _pointer(err.absolute_path),
            "message": err.message,
            "keyword": str(err.validator),
        })
    errors.sort(key=lambda e: (e["path"], e["keyword"]))
    return errors


class SchemaGate:
    def __init__(self, schema_path: str):
        self.schema_path = os.path.abspath(schema_path)
        self._lock = threading.Lock()
        self._stamp: Optional[Tuple[int, int]] = None
        self._schema: Optional[Dict[str, Any]] = None
        self._validator: Optional[Draft202012Validator] = None

    def _load(self) -> Tuple[Dict[str, Any], Draft202012Validator]:
        st = os.stat(self.schema_path)
        stamp = (st.st_mtime_ns, st.st_size)
        with self._lock:
            if self._validator is None or stamp != self._stamp:
                schema = load_json(self.schema_path)
                self._validator = compile_schema(schema)
                self._schema = schema
                self._stamp = stamp
                logger.info(f"[schema] compiled {os.path.basename(self.schema_path)}")
            return self._schema, self._validator

    @property
    def schema(self) -> Dict[str, Any]:
        return self._load()[0]

    def validate(self, document: Any) -> List[Dict[str, str]]:
        _, validator = self._load()
        return collect_errors(validator, document)

    def check(self, document: Any) -> None:
        errors = self.validate(document)
        if errors:
            raise BadRequest("Invalid payload", errors)


_GATES: Dict[str, SchemaGate] = {}
_GATES_LOCK = threading.Lock()


def get_schema_gate(schema_path: str) -> SchemaGate:
    key = os.path.abspath(schema_path)
    with _GATES_LOCK:
        gate = _GATES.get(key)
        if gate is None:
            gate = SchemaGate(key)
            _GATES[key] = gate
        return gate
