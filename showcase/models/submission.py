"""
Architectural Showcase Portal
Submission domain model.

Models:
    - Submission: one project-entry document per user (1:1, created lazily)

Architecture:
    User ──1:1──▶ Submission
    Submission.architects               JSON list, exactly 3 positional slots
    Submission.manufacturers_suppliers  JSON object, category → supplier

Lifecycle states:
    Submission:  draft → in_progress → completed (terminal)
"""

from datetime import date, datetime, timezone

from showcase.core.snapshot import (
    ARCHITECT_SLOT_COUNT,
    DATE_FIELDS,
    SCALAR_FIELDS,
    ArchitectSlot,
    SubmissionSnapshot,
)
from showcase.models import db


# ── Constants ────────────────────────────────────────────────────────────────

SUBMISSION_STATUSES = {"draft", "in_progress", "completed"}


# ── Lifecycle Transition Guards ──────────────────────────────────────────────

SUBMISSION_TRANSITIONS = {
    "draft":       ["in_progress"],
    "in_progress": ["completed"],
    "completed":   [],
}


def validate_submission_transition(old_status, new_status):
    """Return True if Submission status transition is valid."""
    return new_status in SUBMISSION_TRANSITIONS.get(old_status, [])


def _iso(value):
    return value.isoformat() if value else None


# ═════════════════════════════════════════════════════════════════════════════
# Submission
# ═════════════════════════════════════════════════════════════════════════════


class Submission(db.Model):
    """
    A registered organization's showcase entry.

    The scalar columns mirror ``SCALAR_FIELDS`` one-to-one; the store never
    writes a column outside that list. ``updated_at`` is only ever assigned by
    the submission store, never from client input.
    """

    __tablename__ = "submissions"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, unique=True, index=True,
        comment="One submission per user",
    )
    status = db.Column(
        db.String(20), nullable=False, default="draft",
        comment="draft | in_progress | completed",
    )

    # 1.0 Submission information
    project_name = db.Column(db.Text)
    project_location = db.Column(db.Text)
    project_address = db.Column(db.Text)
    contact_name = db.Column(db.Text)
    contact_title = db.Column(db.Text)
    contact_phone = db.Column(db.Text)
    contact_email = db.Column(db.Text)
    contact_role = db.Column(db.Text)
    authorization = db.Column(db.Boolean, nullable=False, default=False)

    # 2.0 Project data
    project_type = db.Column(db.Text)
    project_category = db.Column(db.Text)
    date_of_occupancy = db.Column(db.Date)
    total_construction_cost = db.Column(
        db.Text, comment="Free text; numeric content feeds cost aggregation",
    )
    total_gross_sqft = db.Column(db.Text)
    seating_capacity = db.Column(db.Text)
    cost_per_sqft = db.Column(db.Text)
    primary_funding = db.Column(db.Text)

    # Facility representative
    facility_rep_name = db.Column(db.Text)
    facility_rep_title = db.Column(db.Text)
    facility_rep_phone = db.Column(db.Text)
    facility_rep_email = db.Column(db.Text)
    facility_rep_address = db.Column(db.Text)

    # 3.0 Project details
    project_summary = db.Column(db.Text)
    project_description = db.Column(db.Text)
    special_instructions = db.Column(db.Text)

    # 4.0 Architects / manufacturers
    architects = db.Column(db.JSON, nullable=False, default=list)
    manufacturers_suppliers = db.Column(db.JSON, nullable=False, default=dict)

    # 5.0 Image submission
    photo_credits = db.Column(db.Text)
    photo_special_instructions = db.Column(db.Text)

    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
        comment="Set by the store on every successful persist",
    )
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    __table_args__ = (
        db.CheckConstraint(
            "status IN ('draft', 'in_progress', 'completed')",
            name="ck_submission_status",
        ),
        db.Index("ix_submissions_status", "status"),
    )

    # Relationships
    owner = db.relationship("User", back_populates="submission")

    # ── Snapshot conversion ──────────────────────────────────────────────

    def to_snapshot(self):
        """Return the current column values as an immutable snapshot."""
        data = {}
        for name in SCALAR_FIELDS:
            value = getattr(self, name)
            if name in DATE_FIELDS and isinstance(value, date):
                value = value.isoformat()
            data[name] = value
        data["architects"] = self.architects or []
        data["manufacturers_suppliers"] = self.manufacturers_suppliers or {}
        return SubmissionSnapshot.from_dict(data)

    def apply_snapshot(self, snapshot):
        """Overwrite every field column with the snapshot's values."""
        for name in SCALAR_FIELDS:
            value = snapshot.get(name)
            if name in DATE_FIELDS:
                value = date.fromisoformat(value) if value else None
            elif name == "authorization":
                value = bool(value)
            setattr(self, name, value)

        slots = list(snapshot.architects)[:ARCHITECT_SLOT_COUNT]
        slots += [ArchitectSlot()] * (ARCHITECT_SLOT_COUNT - len(slots))
        self.architects = [slot.to_dict() for slot in slots]
        self.manufacturers_suppliers = dict(snapshot.manufacturers_suppliers)

    def to_dict(self, include_owner=False):
        d = self.to_snapshot().to_dict()
        d["authorization"] = bool(self.authorization)
        d.update({
            "id": self.id,
            "owner_id": self.owner_id,
            "status": self.status,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "completed_at": _iso(self.completed_at),
        })
        if include_owner and self.owner is not None:
            d["firm_name"] = self.owner.firm_name
            d["email"] = self.owner.email
        return d

    def __repr__(self):
        return f"<Submission {self.id}: owner={self.owner_id} [{self.status}]>"
