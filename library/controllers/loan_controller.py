# library/controllers/loan_controller.py

from flask import Blueprint, request, jsonify

from library.extensions import db
from library.services.errors import LibraryError
from library.services.loan_service import LoanLedger
from library.utils.responses import json_error
from library.utils.timestamps import to_epoch
from library.utils.validation import json_object, required_str

loan_bp = Blueprint("loans", __name__, url_prefix="/api/v1/loans")


def _ledger():
    return LoanLedger(db.session)


@loan_bp.get("")
def list_active_loans():
    try:
        loans = _ledger().list_active_loans()
        return jsonify([d.to_json() for d in loans])
    except LibraryError as e:
        return json_error(e)


@loan_bp.get("/overdue")
def list_overdue_loans():
    try:
        loans = _ledger().list_overdue_loans()
        return jsonify([d.to_json() for d in loans])
    except LibraryError as e:
        return json_error(e)


@loan_bp.post("")
def create_loan():
    data = request.get_json(silent=True) or {}
    try:
        data = json_object(data)
        borrower_id = required_str(data, "borrower_id")
        barcode = required_str(data, "barcode")
        loan = _ledger().create_loan(borrower_id, barcode)
        return jsonify({
            "id": loan.id,
            "due_date": to_epoch(loan.due_date),
            "loan_duration_days": loan.loan_duration_days,
        }), 201
    except LibraryError as e:
        return json_error(e)


@loan_bp.post("/<loan_id>/return")
def return_loan(loan_id: str):
    try:
        loan = _ledger().return_loan(loan_id)
        return jsonify({
            "message": "Loan returned successfully",
            "return_date": to_epoch(loan.return_date),
        })
    except LibraryError as e:
        return json_error(e)


@loan_bp.post("/<loan_id>/extend")
def extend_loan(loan_id: str):
    try:
        loan = _ledger().extend_loan(loan_id)
        return jsonify({
            "message": "Loan extended successfully",
            "new_due_date": to_epoch(loan.new_due_date),
            "extension_count": loan.extension_count,
            "original_duration_days": loan.original_duration_days,
        })
    except LibraryError as e:
        return json_error(e)
