"""Pydantic DTOs for resource records, generated from the resource catalogue.

Each writable resource gets an ``<Name>Create`` model (required fields and
defaults enforced) and an ``<Name>Update`` model (every field optional).
Both forbid unknown fields so a typo never silently disappears.
"""

from datetime import date
from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    create_model,
)
from pydantic import ValidationError as PydanticValidationError

from farmdesk.domain.entities import (
    SYSTEM_FIELDS,
    FieldSpec,
    FieldType,
    ResourceSpec,
)
from farmdesk.domain.exceptions import ValidationError

_PYTHON_TYPES: dict[FieldType, Any] = {
    FieldType.TEXT: str,
    FieldType.NUMBER: float,
    FieldType.INTEGER: int,
    FieldType.BOOLEAN: bool,
    FieldType.DATE: date,
    FieldType.JSON: Any,
}

_NonEmptyText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _blank_to_none(value: Any) -> Any:
    """Forms submit empty strings for untouched optional inputs."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class _RecordPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")


def _base_type(spec: FieldSpec) -> Any:
    if spec.choices:
        return Literal[spec.choices]  # type: ignore[valid-type]
    if spec.type is FieldType.TEXT and spec.required:
        return _NonEmptyText
    return _PYTHON_TYPES[spec.type]


def _field_constraints(spec: FieldSpec) -> dict[str, Any]:
    constraints: dict[str, Any] = {}
    if spec.minimum is not None:
        constraints["ge"] = spec.minimum
    if spec.maximum is not None:
        constraints["le"] = spec.maximum
    return constraints


def _create_field(spec: FieldSpec) -> tuple[Any, Any]:
    base = _base_type(spec)
    constraints = _field_constraints(spec)
    if spec.required:
        return (base, Field(..., **constraints))
    annotated = Annotated[base | None, BeforeValidator(_blank_to_none)]
    return (annotated, Field(spec.default, **constraints))


def _update_field(spec: FieldSpec) -> tuple[Any, Any]:
    base = _base_type(spec)
    annotated = Annotated[base | None, BeforeValidator(_blank_to_none)]
    return (annotated, Field(None, **_field_constraints(spec)))


@lru_cache
def create_model_for(spec: ResourceSpec) -> type[BaseModel]:
    """Build (once) the insert DTO for a resource."""
    fields = {f.name: _create_field(f) for f in spec.caller_fields}
    name = "".join(part.title() for part in spec.name.value.split("_")) + "Create"
    return create_model(name, __base__=_RecordPayload, **fields)


@lru_cache
def update_model_for(spec: ResourceSpec) -> type[BaseModel]:
    """Build (once) the patch DTO for a resource."""
    fields = {f.name: _update_field(f) for f in spec.caller_fields}
    name = "".join(part.title() for part in spec.name.value.split("_")) + "Update"
    return create_model(name, __base__=_RecordPayload, **fields)


def _format_errors(exc: PydanticValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "body"
        messages.append(f"{location}: {error['msg']}")
    return messages


def _strip_system_fields(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if k not in SYSTEM_FIELDS}


def validate_insert(spec: ResourceSpec, payload: dict[str, Any]) -> dict[str, Any]:
    """Validate an insert payload and return JSON-safe field values.

    Raises:
        ValidationError: when required fields are missing, values have the
            wrong type, or unknown fields are present.
    """
    if not spec.writable:
        raise ValidationError(spec.name.value, [f"{spec.label} is read-only"])
    model = create_model_for(spec)
    try:
        parsed = model.model_validate(_strip_system_fields(payload))
    except PydanticValidationError as exc:
        raise ValidationError(spec.name.value, _format_errors(exc)) from exc
    return parsed.model_dump(mode="json")


def validate_patch(spec: ResourceSpec, payload: dict[str, Any]) -> dict[str, Any]:
    """Validate a partial update and return only the fields that were sent."""
    if not spec.writable:
        raise ValidationError(spec.name.value, [f"{spec.label} is read-only"])
    model = update_model_for(spec)
    try:
        parsed = model.model_validate(_strip_system_fields(payload))
    except PydanticValidationError as exc:
        raise ValidationError(spec.name.value, _format_errors(exc)) from exc

    patch = parsed.model_dump(mode="json", exclude_unset=True)
    cleared = [name for name in spec.required_fields if name in patch and patch[name] is None]
    if cleared:
        raise ValidationError(
            spec.name.value, [f"{name}: field is required and cannot be null" for name in cleared]
        )
    return patch


def parse_filters(spec: ResourceSpec, params: dict[str, str]) -> dict[str, Any]:
    """Coerce ``?field=value`` query parameters to the field's type.

    Only known fields are accepted; each must parse as its declared type.
    """
    filters: dict[str, Any] = {}
    errors: list[str] = []
    for name, raw in params.items():
        field_spec = spec.get_field(name)
        if field_spec is None or field_spec.type is FieldType.JSON:
            errors.append(f"{name}: not a filterable field")
            continue
        adapter = TypeAdapter(_PYTHON_TYPES[field_spec.type])
        try:
            filters[name] = adapter.dump_python(adapter.validate_python(raw), mode="json")
        except PydanticValidationError:
            errors.append(f"{name}: invalid {field_spec.type.value} value '{raw}'")
    if errors:
        raise ValidationError(spec.name.value, errors)
    return filters
