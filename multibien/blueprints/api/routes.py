# multibien/blueprints/api/routes.py

from flask import Blueprint, jsonify

from multibien.services.export_slot import export_slot

api_bp = Blueprint("api", __name__)

@api_bp.route("/ping")
def ping():
    active = export_slot.active
    return jsonify({
        "status": "ok",
        "activeExport": active.export_name if active is not None else None,
    })
