"""Value objects attached to requests."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from paybuilder.models.enums import AddressType


@dataclass
class Address:
    """Billing or shipping address; ``type`` is stamped by the builder."""

    street_address_1: Optional[str] = None
    street_address_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    type: AddressType = AddressType.BILLING


@dataclass
class EcommerceInfo:
    channel: str = "ECOM"
    ship_day: Optional[int] = None
    ship_month: Optional[int] = None


@dataclass
class HostedPaymentData:
    """Extra fields for hosted payment page requests."""

    customer_exists: bool = False
    customer_key: Optional[str] = None
    customer_number: Optional[str] = None
    offer_to_save_card: bool = False
    payment_key: Optional[str] = None
    product_id: Optional[str] = None
    supplementary_data: dict[str, str] = field(default_factory=dict)


@dataclass
class ThreeDSecure:
    """Result of a completed 3-D Secure authentication, used for card defaults."""

    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    order_id: Optional[str] = None
    cavv: Optional[str] = None
    eci: Optional[str] = None
    xid: Optional[str] = None
