class BillingError(ValueError):
    """Base class for every failure raised by the billing engine.

    Each subclass carries a stable ``code`` so the calling layer can map it
    to a response without parsing the message. Extra context is kept in
    ``details``.
    """
    code = 'BillingError'

    def __init__(self, message='', **details):
        super().__init__(message or self.code)
        self.details = details


# ── Tariff / reading ──────────────────────────────────────────
class InvalidUsage(BillingError):
    code = 'InvalidUsage'


class NegativeUsage(BillingError):
    code = 'NegativeUsage'


class TariffNotConfigured(BillingError):
    code = 'TariffNotConfigured'


# ── Ledger ────────────────────────────────────────────────────
class HouseholdNotFound(BillingError):
    code = 'HouseholdNotFound'


class BillAlreadyExists(BillingError):
    code = 'BillAlreadyExists'


class BillNotFound(BillingError):
    code = 'BillNotFound'


# ── Payments ──────────────────────────────────────────────────
class InvalidAmount(BillingError):
    code = 'InvalidAmount'


class OverpaymentRejected(BillingError):
    code = 'OverpaymentRejected'


class TransactionReferenceRequired(BillingError):
    code = 'TransactionReferenceRequired'


class PaymentQRUnavailable(BillingError):
    code = 'PaymentQRUnavailable'


# ── Persistence ───────────────────────────────────────────────
class ConcurrencyConflict(BillingError):
    code = 'ConcurrencyConflict'
