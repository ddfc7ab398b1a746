"""Domain models for orders, courier credentials and waybill batches."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

COD = "COD"


class DeliveryOutcome(str, Enum):
    SUCCESS = "Success"
    RETURN = "Return"
    OTHER = "Other"


@dataclass(slots=True)
class Order:
    """A customer order as stored in ``customer_orders``."""

    id: str
    order_number: Optional[str]
    sale_id: Optional[str]
    customer_name: str
    phone: str
    address: str
    postcode: str
    city: str
    state: str
    price: float
    payment_mode: Optional[str]
    product: str
    staff_id: Optional[str]
    staff_code: Optional[str]
    tracking_number: Optional[str] = None
    delivery_status: Optional[str] = None
    raw_status: Optional[str] = None
    courier: Optional[str] = None
    order_date: Optional[str] = None
    raw: dict = field(default_factory=dict)

    @property
    def is_cod(self) -> bool:
        return (self.payment_mode or "").strip().upper() == COD


@dataclass(slots=True)
class CourierConfig:
    """Sender identity and API credentials from ``ninjavan_config``."""

    client_id: str
    client_secret: str
    sender_name: str
    sender_phone: str
    sender_email: str
    sender_address1: str
    sender_address2: str
    sender_postcode: str
    sender_city: str
    sender_state: str


@dataclass(slots=True)
class CourierToken:
    access_token: str
    expires_at: datetime


@dataclass(slots=True)
class DeviceSetting:
    """A staff member's WhatsApp gateway device."""

    user_id: Optional[str]
    device_id: Optional[str]
    instance: Optional[str]
    status_wa: Optional[str]
    webhook_id: Optional[str] = None
    staff_code: Optional[str] = None
    staff_name: Optional[str] = None

    @property
    def is_connected(self) -> bool:
        return self.status_wa == "connected" and bool(self.instance)


@dataclass(slots=True, frozen=True)
class WaybillSource:
    """One waybill to fetch, either by courier tracking number or by direct URL."""

    tracking_number: Optional[str] = None
    url: Optional[str] = None

    def __post_init__(self) -> None:
        if bool(self.tracking_number) == bool(self.url):
            raise ValueError("WaybillSource needs exactly one of tracking_number or url")

    @property
    def identifier(self) -> str:
        return self.tracking_number or self.url or ""


@dataclass(slots=True)
class MergeResult:
    document: bytes
    succeeded: list[str]
    failed: list[str]
    warning: Optional[str] = None


@dataclass(slots=True)
class CancellationResult:
    tracking_id: Optional[str]
    status: Optional[str]


@dataclass(slots=True)
class SubmissionResult:
    order_id: str
    sale_id: str
    tracking_number: str


@dataclass(slots=True)
class StatusUpdate:
    """A courier status callback, consumed once."""

    raw_status: str
    tracking_id: Optional[str]
    sale_id: Optional[str]
    received_at: datetime
