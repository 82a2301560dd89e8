"""JSON Schema and a markdown reference for shouldkit.yaml, built from the config models."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ValidationError

from shouldkit.config import EnvPropagationRule, HarnessConfig, ShouldkitConfig, SuiteRef

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

# documented in this order under their YAML key
DOC_SECTIONS: list[tuple[str, type[BaseModel]]] = [
    ("harness", HarnessConfig),
    ("harness.propagate_env[]", EnvPropagationRule),
    ("suites[]", SuiteRef),
]


def generate_json_schema() -> dict:
    schema = ShouldkitConfig.model_json_schema()
    schema["$schema"] = SCHEMA_DIALECT
    schema["title"] = "shouldkit config"
    # suites also accept the "path:attribute" shorthand
    schema["properties"]["suites"]["items"] = {
        "anyOf": [
            {"type": "string", "pattern": "^.+(:[A-Za-z_][A-Za-z0-9_]*)?$"},
            schema["properties"]["suites"]["items"],
        ]
    }
    return schema


def write_json_schema(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(generate_json_schema(), indent=2) + "\n")


def _type_name(annotation) -> str:
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "").replace("shouldkit.config.", "")


def _effective_defaults(model: type[BaseModel]) -> dict:
    """Defaults after validators run, e.g. the built-in propagation rule."""
    try:
        return model().model_dump(mode="json")
    except ValidationError:
        return {}


def _field_lines(model: type[BaseModel]) -> list[str]:
    defaults = _effective_defaults(model)
    lines = []
    for name, field in model.model_fields.items():
        line = f"- `{name}` ({_type_name(field.annotation)})"
        if field.is_required():
            line += ", required"
        else:
            default = defaults.get(name, field.get_default(call_default_factory=True))
            line += f", default `{json.dumps(default)}`"
        lines.append(line)
    return lines


def generate_schema_doc() -> str:
    lines = [
        "# shouldkit YAML Schema",
        "",
        "Generated from the config models; see `shouldkit schema generate`.",
        "",
        "## Top-level keys",
        "- `harness`: command harness settings (optional).",
        "- `suites`: list of suite references, either `path:attribute` or an object.",
    ]
    for key, model in DOC_SECTIONS:
        lines += ["", f"## `{key}`"]
        if model.__doc__:
            lines += ["", model.__doc__.strip().splitlines()[0], ""]
        lines += _field_lines(model)
    lines.append("")
    return "\n".join(lines)


def write_schema_doc(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_schema_doc())
