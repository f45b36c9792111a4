"""Enumerations for the transaction builder domain model."""

from enum import Enum, Flag, auto


class TransactionKind(Flag):
    """
    The fundamental operation a request asks the gateway to perform.

    Members are independent bits so a validation rule can be keyed by a
    combination (``AUTH | SALE | REFUND``). A request itself always holds
    exactly one member; rule matching is membership (``kind in rule.kinds``).
    """

    DECLINE = auto()
    VERIFY = auto()
    CAPTURE = auto()
    AUTH = auto()
    REFUND = auto()
    REVERSAL = auto()
    SALE = auto()
    EDIT = auto()
    VOID = auto()
    ADD_VALUE = auto()
    BALANCE = auto()
    ACTIVATE = auto()
    ALIAS = auto()
    REPLACE = auto()
    REWARD = auto()
    DEACTIVATE = auto()
    BATCH_CLOSE = auto()
    CREATE = auto()
    FETCH = auto()
    SEARCH = auto()
    HOLD = auto()
    RELEASE = auto()
    BENEFIT_WITHDRAWAL = auto()
    TOKEN_UPDATE = auto()
    TOKEN_DELETE = auto()


class ProcessingModifier(str, Enum):
    """Specialization of how a transaction kind is processed (exact match)."""

    NONE = "none"
    INCREMENTAL = "incremental"
    ADDITIONAL = "additional"
    OFFLINE = "offline"
    LEVEL_II = "level_ii"
    FRAUD_DECLINE = "fraud_decline"
    CHIP_DECLINE = "chip_decline"
    CASH_BACK = "cash_back"
    VOUCHER = "voucher"
    SECURE_3D = "secure_3d"
    HOSTED_REQUEST = "hosted_request"
    RECURRING = "recurring"


class PaymentMethodKind(str, Enum):
    """Tag carried by every payment method."""

    REFERENCE = "reference"
    CREDIT = "credit"
    DEBIT = "debit"
    EBT = "ebt"
    CASH = "cash"
    ACH = "ach"
    GIFT = "gift"
    RECURRING = "recurring"


class BuilderState(str, Enum):
    """Lifecycle states for a single request builder."""

    CREATED = "created"
    CONFIGURING = "configuring"
    COMMITTING = "committing"
    DISPATCHED = "dispatched"
    REJECTED = "rejected"


class RuleOutcome(str, Enum):
    """What a field check asserts about its field."""

    REQUIRED = "required"
    FORBIDDEN = "forbidden"


class AddressType(str, Enum):
    BILLING = "billing"
    SHIPPING = "shipping"


class AliasAction(str, Enum):
    CREATE = "create"
    ADD = "add"
    DELETE = "delete"


class InquiryType(str, Enum):
    STANDARD = "standard"
    FOODSTAMP = "foodstamp"
    CASH = "cash"
    POINTS = "points"


class RecurringType(str, Enum):
    FIXED = "fixed"
    VARIABLE = "variable"


class RecurringSequence(str, Enum):
    FIRST = "first"
    SUBSEQUENT = "subsequent"
    LAST = "last"


class TaxType(str, Enum):
    NOT_USED = "not_used"
    SALES_TAX = "sales_tax"
    TAX_EXEMPT = "tax_exempt"


class TransactionStatus(str, Enum):
    """Gateway outcome of a dispatched request."""

    APPROVED = "approved"
    PARTIALLY_APPROVED = "partially_approved"
    DECLINED = "declined"
    PENDING = "pending"
