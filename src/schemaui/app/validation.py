"""JSON Schema validation of built form values and error routing onto fields."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Union

from jsonschema import exceptions, validators

from ..consts import ROOT_ERROR_PREFIX
from ..errors import FieldCoercionError, SchemaError
from ..form.state import FormState
from ..utils import pointer_from_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationIssue:
    pointer: str
    message: str


class SchemaValidator:
    """Thin wrapper over a `jsonschema` validator reporting pointer-addressed issues."""

    def __init__(self, schema: dict[str, Any]):
        cls = validators.validator_for(schema)
        try:
            cls.check_schema(schema)
        except exceptions.SchemaError as e:
            raise SchemaError(f"invalid JSON schema: {e.message}") from e
        self.schema = schema
        self._validator = cls(schema)

    def is_valid(self, value: Any) -> bool:
        return self._validator.is_valid(value)

    def iter_errors(self, value: Any) -> Iterator[ValidationIssue]:
        for error in self._validator.iter_errors(value):
            yield ValidationIssue(pointer_from_path(error.absolute_path), error.message)


@dataclass
class Valid:
    value: dict[str, Any]


@dataclass
class Invalid:
    issues: int
    global_errors: list[str] = field(default_factory=list)


@dataclass
class BuildError:
    message: str


ValidationOutcome = Union[Valid, Invalid, BuildError]


def validate_form(form_state: FormState, validator: SchemaValidator) -> ValidationOutcome:
    """Build the form value and route every validation issue.

    Issues whose pointer matches a field are attached to it; the rest are
    returned as global errors prefixed with their pointer (or `<root>`).
    """
    try:
        value = form_state.try_build_value()
    except FieldCoercionError as e:
        form_state.set_error(e.pointer, e.message)
        return BuildError(e.message)

    form_state.clear_errors()
    if validator.is_valid(value):
        return Valid(value)

    issues = 0
    global_errors = []
    for issue in validator.iter_errors(value):
        issues += 1
        if not form_state.set_error(issue.pointer, issue.message):
            global_errors.append(f"{issue.pointer or ROOT_ERROR_PREFIX}: {issue.message}")
    logger.debug(f"Validation found {issues} issue(s), {len(global_errors)} global")
    return Invalid(issues=issues, global_errors=global_errors)

