"""
Draft Mutator — applies one field edit to a submission snapshot.

Three edit shapes:
    FieldEdit(field, value)                      flat scalar field set
    NestedEdit(collection, index, field, value)  architect slot field set (index 0..2)
    MapEdit(map_name, key, value)                manufacturers/suppliers entry set

``apply_edit`` is pure: it never touches the input snapshot, performs no I/O
and raises ``ValidationError`` for undeclared names or ill-typed values, in
which case the caller keeps its previous snapshot.

Usage:
    from showcase.services.draft_mutator import FieldEdit, apply_edit

    snap = apply_edit(snap, FieldEdit("project_name", "Aquatic Center"))
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from types import MappingProxyType
from typing import Any, Mapping, Union

from showcase.core.exceptions import ValidationError
from showcase.core.snapshot import (
    ARCHITECT_SLOT_COUNT,
    ARCHITECT_SLOT_FIELDS,
    ARCHITECTS,
    BOOLEAN_FIELDS,
    DATE_FIELDS,
    EMPTY_ARCHITECTS,
    MANUFACTURERS_SUPPLIERS,
    READ_ONLY_KEYS,
    SCALAR_FIELD_SET,
    SCALAR_FIELDS,
    ArchitectSlot,
    SubmissionSnapshot,
)

MAX_TEXT_LENGTH = 20_000
MAX_KEY_LENGTH = 200


@dataclass(frozen=True)
class FieldEdit:
    field: str
    value: Any


@dataclass(frozen=True)
class NestedEdit:
    collection: str
    index: int
    field: str
    value: Any


@dataclass(frozen=True)
class MapEdit:
    map_name: str
    key: str
    value: Any


Edit = Union[FieldEdit, NestedEdit, MapEdit]


# ── Value coercion ───────────────────────────────────────────────────────────


def _coerce_text(name: str, value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"'{name}' must be text", details={name: "expected text"})
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        raise ValidationError(f"'{name}' must be text", details={name: "expected text"})
    if len(value) > MAX_TEXT_LENGTH:
        raise ValidationError(
            f"'{name}' exceeds {MAX_TEXT_LENGTH} characters",
            details={name: "too long"},
        )
    return value


def _coerce_scalar(name: str, value: Any) -> Any:
    if name in BOOLEAN_FIELDS:
        if value is None:
            return False
        if not isinstance(value, bool):
            raise ValidationError(f"'{name}' must be true or false", details={name: "expected boolean"})
        return value

    text = _coerce_text(name, value)
    if name in DATE_FIELDS and text:
        try:
            date.fromisoformat(text)
        except ValueError:
            raise ValidationError(
                f"'{name}' must be an ISO date (YYYY-MM-DD)",
                details={name: "invalid date"},
            ) from None
    return text


# ── Edit application ─────────────────────────────────────────────────────────


def _apply_field(snapshot: SubmissionSnapshot, edit: FieldEdit) -> SubmissionSnapshot:
    if edit.field not in SCALAR_FIELD_SET:
        raise ValidationError(f"Unknown field '{edit.field}'", details={edit.field: "unknown field"})
    fields = dict(snapshot.fields)
    fields[edit.field] = _coerce_scalar(edit.field, edit.value)
    return replace(snapshot, fields=MappingProxyType(fields))


def _apply_nested(snapshot: SubmissionSnapshot, edit: NestedEdit) -> SubmissionSnapshot:
    if edit.collection != ARCHITECTS:
        raise ValidationError(
            f"Unknown collection '{edit.collection}'",
            details={edit.collection: "unknown collection"},
        )
    if isinstance(edit.index, bool) or not isinstance(edit.index, int) or not (
        0 <= edit.index < ARCHITECT_SLOT_COUNT
    ):
        raise ValidationError(
            f"Architect index must be between 0 and {ARCHITECT_SLOT_COUNT - 1}",
            details={"index": "out of range"},
        )
    if edit.field not in ARCHITECT_SLOT_FIELDS:
        raise ValidationError(
            f"Unknown architect field '{edit.field}'",
            details={edit.field: "unknown field"},
        )

    slots = list(snapshot.architects) + list(EMPTY_ARCHITECTS[len(snapshot.architects):])
    value = _coerce_text(edit.field, edit.value) or ""
    slots[edit.index] = replace(slots[edit.index] or ArchitectSlot(), **{edit.field: value})
    return replace(snapshot, architects=tuple(slots))


def _apply_map(snapshot: SubmissionSnapshot, edit: MapEdit) -> SubmissionSnapshot:
    if edit.map_name != MANUFACTURERS_SUPPLIERS:
        raise ValidationError(f"Unknown map '{edit.map_name}'", details={edit.map_name: "unknown map"})
    if not isinstance(edit.key, str) or not edit.key.strip():
        raise ValidationError("Supplier category must be non-empty text", details={"key": "required"})
    if len(edit.key) > MAX_KEY_LENGTH:
        raise ValidationError(
            f"Supplier category exceeds {MAX_KEY_LENGTH} characters",
            details={"key": "too long"},
        )
    suppliers = dict(snapshot.manufacturers_suppliers)
    suppliers[edit.key] = _coerce_text(edit.key, edit.value) or ""
    return replace(snapshot, manufacturers_suppliers=MappingProxyType(suppliers))


def apply_edit(snapshot: SubmissionSnapshot, edit: Edit) -> SubmissionSnapshot:
    """Return a new snapshot with ``edit`` applied; ``snapshot`` is left untouched."""
    if isinstance(edit, FieldEdit):
        return _apply_field(snapshot, edit)
    if isinstance(edit, NestedEdit):
        return _apply_nested(snapshot, edit)
    if isinstance(edit, MapEdit):
        return _apply_map(snapshot, edit)
    raise ValidationError(f"Unsupported edit type: {type(edit).__name__}")


# ── JSON forms ───────────────────────────────────────────────────────────────


def edit_from_dict(payload: Mapping[str, Any]) -> Edit:
    """Parse the JSON form of an edit.

    Accepted shapes:
        {"type": "field",  "field": ..., "value": ...}
        {"type": "nested", "collection": "architects", "index": 0, "field": ..., "value": ...}
        {"type": "map",    "map": "manufacturers_suppliers", "key": ..., "value": ...}
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Edit must be a JSON object")
    kind = payload.get("type", "field")
    try:
        if kind == "field":
            return FieldEdit(payload["field"], payload.get("value"))
        if kind == "nested":
            return NestedEdit(
                payload["collection"], payload["index"], payload["field"], payload.get("value"),
            )
        if kind == "map":
            return MapEdit(payload["map"], payload["key"], payload.get("value"))
    except KeyError as exc:
        raise ValidationError(
            f"Edit is missing '{exc.args[0]}'", details={exc.args[0]: "required"},
        ) from None
    raise ValidationError(f"Unknown edit type '{kind}'", details={"type": "unknown edit type"})


def edit_to_dict(edit: Edit) -> dict:
    """Inverse of ``edit_from_dict`` (used by the HTTP gateway)."""
    if isinstance(edit, FieldEdit):
        return {"type": "field", "field": edit.field, "value": edit.value}
    if isinstance(edit, NestedEdit):
        return {
            "type": "nested", "collection": edit.collection,
            "index": edit.index, "field": edit.field, "value": edit.value,
        }
    if isinstance(edit, MapEdit):
        return {"type": "map", "map": edit.map_name, "key": edit.key, "value": edit.value}
    raise ValidationError(f"Unsupported edit type: {type(edit).__name__}")


def snapshot_from_payload(
    payload: Mapping[str, Any],
    base: SubmissionSnapshot | None = None,
) -> SubmissionSnapshot:
    """Merge a full/partial JSON document onto ``base`` through the same edit rules.

    Keys absent from the payload keep their ``base`` value; read-only keys
    (id, status, timestamps...) are ignored; anything else undeclared is
    rejected as a whole before any change is applied.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Submission payload must be a JSON object")

    known = SCALAR_FIELD_SET | {ARCHITECTS, MANUFACTURERS_SUPPLIERS} | READ_ONLY_KEYS
    unknown = sorted(k for k in payload if k not in known)
    if unknown:
        raise ValidationError(
            f"Unknown field(s): {', '.join(unknown)}",
            details={k: "unknown field" for k in unknown},
        )

    snap = base or SubmissionSnapshot()
    for name in SCALAR_FIELDS:
        if name in payload:
            snap = apply_edit(snap, FieldEdit(name, payload[name]))

    architects = payload.get(ARCHITECTS)
    if architects is not None:
        if not isinstance(architects, list) or len(architects) > ARCHITECT_SLOT_COUNT:
            raise ValidationError(
                f"'architects' must be a list of at most {ARCHITECT_SLOT_COUNT} entries",
                details={ARCHITECTS: "invalid"},
            )
        for index, slot in enumerate(architects):
            if slot is None:
                continue
            if not isinstance(slot, Mapping):
                raise ValidationError(
                    f"Architect entry {index} must be an object", details={ARCHITECTS: "invalid"},
                )
            for name, value in slot.items():
                snap = apply_edit(snap, NestedEdit(ARCHITECTS, index, name, value))

    suppliers = payload.get(MANUFACTURERS_SUPPLIERS)
    if suppliers is not None:
        if not isinstance(suppliers, Mapping):
            raise ValidationError(
                "'manufacturers_suppliers' must be an object",
                details={MANUFACTURERS_SUPPLIERS: "invalid"},
            )
        for key, value in suppliers.items():
            snap = apply_edit(snap, MapEdit(MANUFACTURERS_SUPPLIERS, key, value))

    return snap


# ── Advisory completeness ────────────────────────────────────────────────────

REQUIRED_FIELDS = (
    "project_name",
    "contact_name",
    "contact_phone",
    "contact_email",
    "project_summary",
    "project_description",
)
SUMMARY_MIN_WORDS = 200
SUMMARY_MAX_WORDS = 300


def check_completeness(snapshot: SubmissionSnapshot) -> list[dict]:
    """Return advisory warnings for missing required fields and summary length.

    Warnings never block a save or the complete action.
    """
    warnings = []
    for name in REQUIRED_FIELDS:
        value = snapshot.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            warnings.append({"field": name, "message": "required"})

    summary = snapshot.get("project_summary") or ""
    words = len(summary.split())
    if summary.strip() and not (SUMMARY_MIN_WORDS <= words <= SUMMARY_MAX_WORDS):
        warnings.append({
            "field": "project_summary",
            "message": f"should be {SUMMARY_MIN_WORDS}-{SUMMARY_MAX_WORDS} words (currently {words})",
        })
    return warnings
