"""Domain-specific exceptions

Every error carries a stable ``code`` and the HTTP status it maps to at the
API boundary.
"""


class DomainException(Exception):
    """Base exception for domain layer"""

    code = "DOMAIN_ERROR"
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAmountError(DomainException):
    """Amount is non-finite, fractional in minor units, or negative where disallowed"""

    code = "INVALID_AMOUNT"
    http_status = 400


class InvalidPlanError(DomainException):
    """Installment plan is malformed (bad count, dates or totals)"""

    code = "INVALID_PLAN"
    http_status = 400


class NotFoundError(DomainException):
    """Charge, ledger entry or payable does not exist"""

    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, resource: str, resource_id):
        super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class AlreadyPaidError(DomainException):
    """Record is already paid and cannot transition again"""

    code = "ALREADY_PAID"
    http_status = 409


class AlreadyCanceledError(DomainException):
    """Record was canceled and cannot be paid or canceled again"""

    code = "ALREADY_CANCELED"
    http_status = 409


class ReconciliationAmbiguousError(DomainException):
    """More than one forecast entry matched a charge.

    Never raised by the engine: it is logged and resolved earliest-first.
    """

    code = "RECONCILIATION_AMBIGUOUS"
    http_status = 409


class StorageFailure(DomainException):
    """Transaction against the backing store failed and was rolled back"""

    code = "STORAGE_FAILURE"
    http_status = 500


class IllegalTransitionError(DomainException):
    """Status transition not allowed from the record's current state"""

    code = "ILLEGAL_TRANSITION"
    http_status = 409
