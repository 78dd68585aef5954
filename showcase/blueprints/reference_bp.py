"""
Reference Blueprint — static lists used by the submission form.

  GET /api/v1/reference/manufacturer-categories
  GET /api/v1/reference/architect-roles
  GET /api/v1/reference/contact-roles
"""

from flask import Blueprint, jsonify

from showcase.core.reference import ARCHITECT_SLOT_ROLES, CONTACT_ROLES, MANUFACTURER_CATEGORIES

reference_bp = Blueprint("reference", __name__, url_prefix="/api/v1/reference")


@reference_bp.route("/manufacturer-categories", methods=["GET"])
def manufacturer_categories():
    return jsonify({"items": list(MANUFACTURER_CATEGORIES), "total": len(MANUFACTURER_CATEGORIES)}), 200


@reference_bp.route("/architect-roles", methods=["GET"])
def architect_roles():
    """Roles of the three architect slots, in slot order."""
    return jsonify({"items": [
        {"index": index, "role": role} for index, role in enumerate(ARCHITECT_SLOT_ROLES)
    ]}), 200


@reference_bp.route("/contact-roles", methods=["GET"])
def contact_roles():
    return jsonify({"items": list(CONTACT_ROLES)}), 200
