"""
catalog/validator.py - JSON Schema validation of endpoint YAML files.

Usage:
    from roundsapi.catalog.validator import validate_catalog_dir

    issues = validate_catalog_dir(Path("catalog"))
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from roundsapi.catalog.loader import CATALOG_DIR

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"
_ENDPOINT_SCHEMA = "endpoint.schema.json"


@dataclass
class ValidationIssue:
    """A single validation finding for a catalog YAML file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "endpoint/fields[0]"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


def _load_schema(name: str) -> dict[str, Any]:
    with (_SCHEMAS_DIR / name).open() as fh:
        return json.load(fh)


def _load_registry() -> Registry:
    schema = _load_schema(_ENDPOINT_SCHEMA)
    return Registry().with_resources(
        [(schema["$id"], Resource(contents=schema, specification=DRAFT202012))]
    )


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def validate_yaml_file(
    yaml_path: Path,
    *,
    registry: Registry | None = None,
) -> list[ValidationIssue]:
    """
    Validate a single endpoint YAML file.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            doc = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if doc is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    validator = Draft202012Validator(
        _load_schema(_ENDPOINT_SCHEMA), registry=registry or _load_registry()
    )
    return [
        ValidationIssue(file=yaml_path, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(doc), key=_json_path)
    ]


def validate_catalog_dir(catalog_dir: Path = CATALOG_DIR) -> list[ValidationIssue]:
    """
    Validate every YAML file under *catalog_dir*/endpoints.

    A file whose stem differs from its endpoint name is reported as a warning.
    """
    endpoints_dir = catalog_dir / "endpoints"
    if not endpoints_dir.is_dir():
        return [ValidationIssue(file=endpoints_dir, message="Endpoints directory not found")]

    registry = _load_registry()
    issues: list[ValidationIssue] = []
    for yaml_file in sorted(endpoints_dir.glob("*.yaml")):
        file_issues = validate_yaml_file(yaml_file, registry=registry)
        issues.extend(file_issues)
        if file_issues:
            continue
        with yaml_file.open() as fh:
            name = yaml.safe_load(fh)["endpoint"]["name"]
        if name != yaml_file.stem:
            issues.append(
                ValidationIssue(
                    file=yaml_file,
                    message=f"Endpoint '{name}' is declared in a file named '{yaml_file.stem}'",
                    severity="warning",
                )
            )

    for issue in issues:
        logger.debug("%s", issue)
    return issues
