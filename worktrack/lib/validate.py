"""
Schema validation for worktrack.

Store documents are checked against JSON Schema whenever they cross the
persistence boundary, on the way in and on the way out.
"""

import json
from pathlib import Path

import jsonschema

STORE_SCHEMA = "store"


class ValidationError(Exception):
    """Schema validation failed."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


_schema_cache: dict[str, dict] = {}


def _get_schemas_dir() -> Path:
    """Get path to the schemas bundled with the package."""
    return Path(__file__).parent.parent / "schemas"


def _load_schema(schema_name: str) -> dict:
    """Load schema by name, with caching."""
    if schema_name not in _schema_cache:
        schema_path = _get_schemas_dir() / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise ValidationError(schema_name, f"Schema file not found: {schema_path}")
        _schema_cache[schema_name] = json.loads(schema_path.read_text())
    return _schema_cache[schema_name]


def _format_path(error: jsonschema.ValidationError) -> str:
    if not error.absolute_path:
        return "(root)"
    return ".".join(str(p) for p in error.absolute_path)


def collect_errors(data: dict, schema_name: str = STORE_SCHEMA) -> list[str]:
    """Return every schema violation in data as 'path: message' strings.

    Errors are ordered by document path so reports are stable.
    """
    schema = _load_schema(schema_name)
    validator_cls = jsonschema.validators.validator_for(schema)
    validator = validator_cls(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    return [f"{_format_path(e)}: {e.message}" for e in errors]


def validate(data: dict, schema_name: str = STORE_SCHEMA) -> None:
    """
    Validate data against named schema.

    Raises:
        ValidationError: with the first violation found
    """
    schema = _load_schema(schema_name)

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        raise ValidationError(schema_name, e.message, _format_path(e)) from None


def validate_before_write(data: dict, filepath: Path, schema_name: str = STORE_SCHEMA) -> None:
    """
    Validate data before writing it to filepath. Never write invalid data.

    Raises:
        ValidationError: If data doesn't match schema
    """
    try:
        validate(data, schema_name)
    except ValidationError as e:
        raise ValidationError(
            schema_name,
            f"Refusing to write invalid data to {filepath}: {e}"
        ) from None
