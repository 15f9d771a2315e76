"""
Serialization helpers for specification objects.

Converts Nodes, bags, views and documents to plain dict/list values
using the visualization grammar's key names (`$schema`, `layer`,
`hconcat`, ...) and back. Absent properties are omitted.
JSON via the standard library, YAML via PyYAML.
"""
from __future__ import annotations

import json
from dataclasses import fields
from typing import Any, Dict

import yaml

from vizcompose.canonical import spec_from_mapping
from vizcompose.model import Document, SpecRecord
from vizcompose.nodes import Node


def to_dict(spec: Any) -> Any:
    if isinstance(spec, Node):
        return spec.raw()
    if isinstance(spec, Document):
        out = record_to_dict(spec.toplevel)
        out.update(record_to_dict(spec.root))
        return out
    if isinstance(spec, SpecRecord):
        return record_to_dict(spec)
    raise TypeError(f"Unsupported specification type: {type(spec)}")


def record_to_dict(record: SpecRecord) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in fields(record):
        value = getattr(record, f.name)
        key = record._ALIASES.get(f.name, f.name)
        if f.name in record._BAGS:
            out.update(record_to_dict(value))
        elif isinstance(value, Node):
            if not value.is_absent:
                out[key] = value.raw()
        elif isinstance(value, tuple):
            out[key] = [record_to_dict(v) for v in value]
        else:
            out[key] = record_to_dict(value)
    return out


def from_dict(d: Any) -> Document:
    return spec_from_mapping(d)


def to_json(spec: Any) -> str:
    return json.dumps(to_dict(spec), sort_keys=True)


def from_json(s: str) -> Document:
    return from_dict(json.loads(s))


def to_yaml(spec: Any) -> str:
    return yaml.safe_dump(to_dict(spec))


def from_yaml(s: str) -> Document:
    return from_dict(yaml.safe_load(s))
