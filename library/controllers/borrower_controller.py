# library/controllers/borrower_controller.py

from flask import Blueprint, request, jsonify

from library.extensions import db
from library.services.borrower_service import BorrowerService
from library.services.errors import LibraryError
from library.utils.responses import json_error
from library.utils.timestamps import to_epoch

borrower_bp = Blueprint("borrowers", __name__, url_prefix="/api/v1")


def _borrower_json(b):
    return {
        "id": b.id,
        "name": b.name,
        "email": b.email,
        "phone": b.phone,
        "address": b.address,
        "city": b.city,
        "zip": b.zip,
        "group_id": b.group_id,
        "created_at": to_epoch(b.created_at),
        "updated_at": to_epoch(b.updated_at),
    }


def _group_json(g):
    return {
        "id": g.id,
        "name": g.name,
        "loan_duration_days": g.loan_duration_days,
        "description": g.description,
        "created_at": to_epoch(g.created_at),
        "updated_at": to_epoch(g.updated_at),
    }


@borrower_bp.get("/borrower-groups")
def list_groups():
    try:
        groups = BorrowerService(db.session).list_groups()
        return jsonify([_group_json(g) for g in groups])
    except LibraryError as e:
        return json_error(e)


@borrower_bp.post("/borrower-groups")
def create_group():
    data = request.get_json(silent=True) or {}
    try:
        g = BorrowerService(db.session).create_group(data)
        return jsonify(_group_json(g)), 201
    except LibraryError as e:
        return json_error(e)


@borrower_bp.put("/borrower-groups/<group_id>")
def update_group(group_id: str):
    data = request.get_json(silent=True) or {}
    try:
        g = BorrowerService(db.session).update_group(group_id, data)
        return jsonify(_group_json(g))
    except LibraryError as e:
        return json_error(e)


@borrower_bp.delete("/borrower-groups/<group_id>")
def delete_group(group_id: str):
    try:
        BorrowerService(db.session).delete_group(group_id)
        return jsonify({"message": "Borrower group deleted successfully"})
    except LibraryError as e:
        return json_error(e)


@borrower_bp.get("/borrowers")
def list_borrowers():
    try:
        rows = BorrowerService(db.session).list_borrowers()
        return jsonify([
            {
                "id": b.id,
                "name": b.name,
                "email": b.email,
                "phone": b.phone,
                "address": b.address,
                "city": b.city,
                "zip": b.zip,
                "group_id": b.group_id,
                "group_name": group_name,
                "loan_duration_days": loan_duration_days,
                "active_loan_count": int(active_loan_count),
                "created_at": to_epoch(b.created_at),
                "updated_at": to_epoch(b.updated_at),
            } for b, group_name, loan_duration_days, active_loan_count in rows
        ])
    except LibraryError as e:
        return json_error(e)


@borrower_bp.post("/borrowers")
def create_borrower():
    data = request.get_json(silent=True) or {}
    try:
        b = BorrowerService(db.session).create_borrower(data)
        return jsonify({"id": b.id, "name": b.name, "group_id": b.group_id}), 201
    except LibraryError as e:
        return json_error(e)


@borrower_bp.put("/borrowers/<borrower_id>")
def update_borrower(borrower_id: str):
    data = request.get_json(silent=True) or {}
    try:
        b = BorrowerService(db.session).update_borrower(borrower_id, data)
        return jsonify(_borrower_json(b))
    except LibraryError as e:
        return json_error(e)


@borrower_bp.delete("/borrowers/<borrower_id>")
def delete_borrower(borrower_id: str):
    try:
        BorrowerService(db.session).delete_borrower(borrower_id)
        return jsonify({"message": "Borrower deleted successfully"})
    except LibraryError as e:
        return json_error(e)
