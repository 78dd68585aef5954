"""
Submission snapshot — the immutable value of a submission's field state.

A snapshot holds:
    - fields:                  declared flat scalar fields (only the ones that were set)
    - architects:              exactly three positional slots (see ARCHITECT_SLOT_ROLES)
    - manufacturers_suppliers: free-text category → supplier map

Snapshots are frozen; mutation always goes through
``showcase.services.draft_mutator.apply_edit`` which returns a new value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from showcase.core.reference import ARCHITECT_SLOT_ROLES


# ── Declared schema ──────────────────────────────────────────────────────────

SCALAR_FIELDS = (
    # 1.0 Submission information
    "project_name",
    "project_location",
    "project_address",
    "contact_name",
    "contact_title",
    "contact_phone",
    "contact_email",
    "contact_role",
    "authorization",
    # 2.0 Project data
    "project_type",
    "project_category",
    "date_of_occupancy",
    "total_construction_cost",
    "total_gross_sqft",
    "seating_capacity",
    "cost_per_sqft",
    "primary_funding",
    # Facility representative
    "facility_rep_name",
    "facility_rep_title",
    "facility_rep_phone",
    "facility_rep_email",
    "facility_rep_address",
    # 3.0 Project details
    "project_summary",
    "project_description",
    "special_instructions",
    # 5.0 Image submission
    "photo_credits",
    "photo_special_instructions",
)
SCALAR_FIELD_SET = frozenset(SCALAR_FIELDS)

BOOLEAN_FIELDS = frozenset({"authorization"})
DATE_FIELDS = frozenset({"date_of_occupancy"})

ARCHITECTS = "architects"
ARCHITECT_SLOT_FIELDS = ("firm_name", "email", "phone", "website", "address")
ARCHITECT_SLOT_COUNT = len(ARCHITECT_SLOT_ROLES)

MANUFACTURERS_SUPPLIERS = "manufacturers_suppliers"

# Keys a client may echo back in a full document; never written from input.
READ_ONLY_KEYS = frozenset({
    "id", "owner_id", "status", "created_at", "updated_at", "completed_at",
    "advisory", "firm_name", "email",
})


@dataclass(frozen=True)
class ArchitectSlot:
    """One positional architect entry; every attribute is optional text."""

    firm_name: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""
    address: str = ""

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in ARCHITECT_SLOT_FIELDS)

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in ARCHITECT_SLOT_FIELDS}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ArchitectSlot":
        data = data or {}
        return cls(**{name: str(data.get(name) or "") for name in ARCHITECT_SLOT_FIELDS})


EMPTY_ARCHITECTS = tuple(ArchitectSlot() for _ in range(ARCHITECT_SLOT_COUNT))


def _frozen(mapping: Mapping | None = None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class SubmissionSnapshot:
    """Immutable full field state of a submission at one instant."""

    fields: Mapping[str, Any] = field(default_factory=_frozen)
    architects: tuple[ArchitectSlot, ...] = EMPTY_ARCHITECTS
    manufacturers_suppliers: Mapping[str, str] = field(default_factory=_frozen)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def to_dict(self) -> dict:
        """JSON-ready document: every declared field, the 3 slots, the supplier map."""
        result = {name: self.fields.get(name) for name in SCALAR_FIELDS}
        result[ARCHITECTS] = [slot.to_dict() for slot in self.architects]
        result[MANUFACTURERS_SUPPLIERS] = dict(self.manufacturers_suppliers)
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "SubmissionSnapshot":
        """Rebuild a snapshot from trusted data (store row or server response).

        Unknown keys are ignored here; untrusted input goes through
        ``draft_mutator.snapshot_from_payload`` instead.
        """
        data = data or {}
        fields = {
            name: data[name]
            for name in SCALAR_FIELDS
            if data.get(name) is not None
        }
        slots = list(data.get(ARCHITECTS) or [])[:ARCHITECT_SLOT_COUNT]
        architects = tuple(ArchitectSlot.from_dict(s) for s in slots)
        architects += EMPTY_ARCHITECTS[len(architects):]
        suppliers = {
            str(k): str(v) if v is not None else ""
            for k, v in (data.get(MANUFACTURERS_SUPPLIERS) or {}).items()
        }
        return cls(
            fields=_frozen(fields),
            architects=architects,
            manufacturers_suppliers=_frozen(suppliers),
        )
