# library/controllers/volume_controller.py

from flask import Blueprint, request, jsonify

from library.extensions import db
from library.services.errors import LibraryError
from library.services.title_service import TitleService
from library.services.volume_service import VolumeService
from library.utils.responses import json_error
from library.utils.timestamps import to_epoch

volume_bp = Blueprint("volumes", __name__, url_prefix="/api/v1")


def _volume_json(v):
    return {
        "id": v.id,
        "title_id": v.title_id,
        "copy_number": v.copy_number,
        "barcode": v.barcode,
        "condition": v.condition,
        "location_id": v.location_id,
        "loan_status": v.loan_status,
        "loanable": bool(v.loanable),
        "individual_notes": v.individual_notes,
        "created_at": to_epoch(v.created_at),
        "updated_at": to_epoch(v.updated_at),
    }


# -----------------------------
# Titles
# -----------------------------
@volume_bp.post("/titles")
def create_title():
    data = request.get_json(silent=True) or {}
    try:
        t = TitleService(db.session).create_title(data)
        return jsonify({"id": t.id}), 201
    except LibraryError as e:
        return json_error(e)


@volume_bp.get("/titles/<title_id>/volumes")
def list_title_volumes(title_id: str):
    try:
        volumes = TitleService(db.session).list_volumes(title_id)
        return jsonify([_volume_json(v) for v in volumes])
    except LibraryError as e:
        return json_error(e)


# -----------------------------
# Volumes
# -----------------------------
@volume_bp.post("/volumes")
def create_volume():
    data = request.get_json(silent=True) or {}
    try:
        v = VolumeService(db.session).create_volume(data)
        return jsonify(_volume_json(v)), 201
    except LibraryError as e:
        return json_error(e)


@volume_bp.get("/volumes/<volume_id>")
def get_volume(volume_id: str):
    try:
        return jsonify(_volume_json(VolumeService(db.session).get_volume(volume_id)))
    except LibraryError as e:
        return json_error(e)


@volume_bp.get("/volumes/barcode/<barcode>")
def get_volume_by_barcode(barcode: str):
    try:
        return jsonify(_volume_json(VolumeService(db.session).get_by_barcode(barcode)))
    except LibraryError as e:
        return json_error(e)


@volume_bp.put("/volumes/<volume_id>")
def update_volume(volume_id: str):
    data = request.get_json(silent=True) or {}
    try:
        v = VolumeService(db.session).update_volume(volume_id, data)
        return jsonify(_volume_json(v))
    except LibraryError as e:
        return json_error(e)


@volume_bp.delete("/volumes/<volume_id>")
def delete_volume(volume_id: str):
    try:
        VolumeService(db.session).delete_volume(volume_id)
        return jsonify({"message": "Volume deleted successfully"})
    except LibraryError as e:
        return json_error(e)
