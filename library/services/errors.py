"""Error taxonomy shared by the services and rendered by the controllers.

Each error carries the HTTP status and a short machine code; controllers turn
any ``LibraryError`` into ``{"success": false, "error": code, "message": ...}``.
"""


class LibraryError(Exception):
    status_code = 500
    code = "error"
    message = "Unexpected error"

    def __init__(self, message=None, **extra):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.extra = extra

    def to_dict(self):
        body = {"success": False, "error": self.code, "message": self.message}
        body.update(self.extra)
        return body


# 404
class NotFoundError(LibraryError):
    status_code = 404
    code = "not_found"
    message = "Resource not found"


class VolumeNotFound(NotFoundError):
    code = "volume_not_found"
    message = "Volume not found with this barcode"


class BorrowerNotFound(NotFoundError):
    code = "borrower_not_found"
    message = "Borrower not found"


class LoanNotFound(NotFoundError):
    code = "loan_not_found"
    message = "Loan not found"


class TitleNotFound(NotFoundError):
    code = "title_not_found"
    message = "Title not found"


class BorrowerGroupNotFound(NotFoundError):
    code = "borrower_group_not_found"
    message = "Borrower group not found"


# 400
class ValidationFailure(LibraryError):
    status_code = 400
    code = "validation_failed"
    message = "Invalid request"


class InvalidRequest(ValidationFailure):
    code = "invalid_request"


class NotLoanable(ValidationFailure):
    code = "not_loanable"
    message = "This volume is not loanable (damaged or restricted)"


class AlreadyLoaned(ValidationFailure):
    code = "already_loaned"
    message = "This volume is already loaned"


class AlreadyReturned(ValidationFailure):
    code = "already_returned"
    message = "This loan has already been returned"


class CannotExtendReturned(ValidationFailure):
    code = "cannot_extend_returned"
    message = "Cannot extend a returned loan"


# 409
class LimitExceeded(LibraryError):
    status_code = 409
    code = "limit_exceeded"
    message = "Operation limit reached"


class ExtensionLimitReached(LimitExceeded):
    code = "extension_limit_reached"
    message = "Maximum extensions reached"


class ConflictError(LibraryError):
    status_code = 409
    code = "conflict"
    message = "Conflicting state"


class VolumeLoaned(ConflictError):
    code = "volume_loaned"
    message = "Cannot delete volume that has active or overdue loans"


class BorrowerHasActiveLoans(ConflictError):
    code = "borrower_has_active_loans"
    message = "Cannot delete borrower with active loans"


class DuplicateBarcode(ConflictError):
    code = "duplicate_barcode"
    message = "A volume with this barcode already exists"


class BorrowerGroupInUse(ConflictError):
    code = "borrower_group_in_use"
    message = "Cannot delete a borrower group that still has borrowers"


# 500
class StoreFailure(LibraryError):
    status_code = 500
    code = "database_error"
    message = "Database error"

    def __init__(self, message=None, detail=None):
        if detail is not None:
            super().__init__(message, details={"error": detail})
        else:
            super().__init__(message)
