"""
Auth models — portal user accounts.

One user per registering organization contact. ``is_admin`` marks the
reporting staff who may read every submission; all other users only ever see
their own submission.
"""

from datetime import datetime, timezone

from showcase.models import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    firm_name = db.Column(db.String(255), default="")
    contact_name = db.Column(db.String(255), default="")
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    last_login_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    submission = db.relationship(
        "Submission", back_populates="owner", uselist=False,
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "firm_name": self.firm_name,
            "contact_name": self.contact_name,
            "is_admin": bool(self.is_admin),
            "last_login_at": self.last_login_at.isoformat() if self.last_login_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<User {self.id}: {self.email}>"
