"""Tool argument validation against JSON Schema.

Each tool's ``inputSchema`` is compiled into a validator the first time the
tool is called and reused afterwards. Validation reports every violation,
not just the first one.
"""

import logging
from typing import Any

from jsonschema import exceptions as jsonschema_exceptions
from jsonschema import validators as jsonschema_validators
from jsonschema.protocols import Validator

logger = logging.getLogger(__name__)


def _instance_path(error: jsonschema_exceptions.ValidationError) -> str:
    if not error.absolute_path:
        return "(root)"
    return "/" + "/".join(str(part) for part in error.absolute_path)


def compile_schema(schema: dict[str, Any]) -> Validator:
    """Build a validator for ``schema`` using the draft it declares (latest otherwise).

    Raises:
        jsonschema.exceptions.SchemaError: If the schema itself is invalid
    """
    validator_cls = jsonschema_validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema, format_checker=validator_cls.FORMAT_CHECKER)


class SchemaValidatorCache:
    """Compile-once cache of validators keyed by tool name."""

    def __init__(self) -> None:
        self._validators: dict[str, Validator] = {}
        self.compile_count = 0

    def validator(self, name: str, schema: dict[str, Any]) -> Validator:
        compiled = self._validators.get(name)
        if compiled is None:
            compiled = compile_schema(schema)
            self._validators[name] = compiled
            self.compile_count += 1
            logger.debug(f"Compiled input schema for {name}")
        return compiled

    def errors(self, name: str, schema: dict[str, Any], arguments: Any) -> list[str]:
        """Every violation of ``schema`` by ``arguments`` as ``"<path> <message>"``."""
        found = sorted(
            self.validator(name, schema).iter_errors(arguments),
            key=lambda e: [str(p) for p in e.absolute_path],
        )
        return [f"{_instance_path(e)} {e.message}" for e in found]
