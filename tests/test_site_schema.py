import json
import os

import pytest

from core.errors import BadRequest
from utils.site_schema import SchemaGate


def test_minimal_document_passes(schema_path, minimal_config):
    assert SchemaGate(schema_path).validate(minimal_config) == []


def test_empty_palette_reports_min_items(schema_path, minimal_config):
    minimal_config["branding"]["palette"]["colors"] = []
    errors = SchemaGate(schema_path).validate(minimal_config)
    assert [(e["path"], e["keyword"]) for e in errors] == [("/branding/palette/colors", "minItems")]
    assert errors[0]["message"]


def test_all_errors_are_reported(schema_path):
    doc = {
        "profile": {"websiteName": ""},
        "branding": {"palette": {"colors": ["red"]}},
        "website": {"catalog": "baroque"},
    }
    errors = SchemaGate(schema_path).validate(doc)
    paths = {e["path"] for e in errors}
    assert paths == {"/profile/websiteName", "/branding/palette/colors/0", "/website/catalog"}


def test_website_name_length_limit(schema_path, minimal_config):
    minimal_config["profile"]["websiteName"] = "x" * 101
    errors = SchemaGate(schema_path).validate(minimal_config)
    assert [e["keyword"] for e in errors] == ["maxLength"]


def test_missing_required_blocks(schema_path):
    errors = SchemaGate(schema_path).validate({})
    assert {e["keyword"] for e in errors} == {"required"}
    assert {e["path"] for e in errors} == {""}


def test_check_raises_bad_request_with_errors(schema_path):
    with pytest.raises(BadRequest) as info:
        SchemaGate(schema_path).check([])
    assert info.value.message == "Invalid payload"
    assert info.value.errors[0]["keyword"] == "type"


def test_schema_edits_take_effect_without_restart(schema_path, minimal_config):
    gate = SchemaGate(schema_path)
    assert gate.validate(minimal_config) == []

    with open(schema_path, encoding="utf-8") as f:
        schema = json.load(f)
    schema["properties"]["branding"]["properties"]["palette"]["properties"]["colors"]["minItems"] = 3
    with open(schema_path, "w", encoding="utf-8") as f:
        json.dump(schema, f)
    # Force a distinct mtime even on coarse-grained filesystems
    st = os.stat(schema_path)
    os.utime(schema_path, ns=(st.st_atime_ns, st.st_mtime_ns + 1_000_000_000))

    errors = gate.validate(minimal_config)
    assert [e["keyword"] for e in errors] == ["minItems"]


def test_validator_is_cached_until_file_changes(schema_path, minimal_config):
    gate = SchemaGate(schema_path)
    gate.validate(minimal_config)
    first = gate._validator
    gate.validate(minimal_config)
    assert gate._validator is first


def test_missing_schema_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        SchemaGate(str(tmp_path / "missing.json")).validate({})


def test_timestamp_format_is_checked(schema_path, minimal_config):
    minimal_config["meta"] = {"timestamp": "not-a-date"}
    errors = SchemaGate(schema_path).validate(minimal_config)
    assert [(e["path"], e["keyword"]) for e in errors] == [("/meta/timestamp", "format")]

    minimal_config["meta"]["timestamp"] = "2025-03-14T09:26:53.589Z"
    assert SchemaGate(schema_path).validate(minimal_config) == []
