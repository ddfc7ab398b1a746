"""Parser for chat-relay commands (``#lead``, ``#order``, ``#status``).

A command is chosen by its leading tag through ``COMMAND_PATTERNS``. The body is
either pipe-separated positional fields on the first line::

    #lead|Ali|60123456789|Skincare|NP|2024-05-01
    #order|Ali|60123456789|No 1 Jalan A|50000|KL|WP|Bundle A|1|99|COD
    #status|60123456789

or ``key: value`` lines after the tag line::

    #order
    nama: Ali
    phone: 0123456789
    ...

Every input maps to exactly one of LeadEntry, OrderEntry, StatusQuery or
Unrecognized.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

LEAD_HINT = "Format: #lead|nama|phone|niche|jenis(NP/EP)|tarikh"
ORDER_HINT = "Format: #order|nama|phone|alamat|poskod|bandar|negeri|produk|kuantiti|harga|bayaran(CASH/COD)"
STATUS_HINT = "Format: #status|phone"


@dataclass(frozen=True, slots=True)
class LeadEntry:
    name: str
    phone: str
    niche: str
    prospect_type: str = "NP"
    date: Optional[str] = None


@dataclass(frozen=True, slots=True)
class OrderEntry:
    name: str
    phone: str
    address: str
    postcode: str
    city: str
    state: str
    product: str
    quantity: int = 1
    price: float = 0.0
    platform: str = "Facebook"
    payment_mode: str = "COD"


@dataclass(frozen=True, slots=True)
class StatusQuery:
    phone: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Unrecognized:
    command: Optional[str] = None
    hint: Optional[str] = None


Command = Union[LeadEntry, OrderEntry, StatusQuery, Unrecognized]

COMMAND_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("lead", re.compile(r"^\s*#lead\b", re.IGNORECASE)),
    ("order", re.compile(r"^\s*#order\b", re.IGNORECASE)),
    ("status", re.compile(r"^\s*#status\b", re.IGNORECASE)),
)

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("nama", "name"),
    "phone": ("phone", "telefon", "hp"),
    "address": ("alamat", "address"),
    "postcode": ("poskod", "postcode"),
    "city": ("bandar", "city"),
    "state": ("negeri", "state"),
    "product": ("produk", "product"),
    "quantity": ("kuantiti", "qty", "quantity"),
    "price": ("harga", "price"),
    "platform": ("platform",),
    "payment": ("bayaran", "payment"),
    "niche": ("niche",),
    "type": ("jenis", "type"),
    "date": ("tarikh", "date"),
}
_ALIAS_LOOKUP = {alias: field for field, aliases in FIELD_ALIASES.items() for alias in aliases}
_KEY_VALUE = re.compile(r"^\s*([A-Za-z]+)\s*:\s*(.*)$")

PLATFORM_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("fb", "facebook"), "Facebook"),
    (("shopee",), "Shopee"),
    (("tiktok", "tik tok"), "Tiktok"),
    (("database", "db"), "Database"),
    (("google",), "Google"),
)


def detect_command(text: str) -> str | None:
    for name, pattern in COMMAND_PATTERNS:
        if pattern.match(text):
            return name
    return None


def normalize_platform(value: str) -> str:
    lowered = value.strip().lower()
    for keywords, platform in PLATFORM_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return platform
    return "Facebook"


def normalize_payment(value: str | None) -> str:
    return "CASH" if (value or "").strip().upper() == "CASH" else "COD"


def parse_price(value: str | None) -> float:
    cleaned = re.sub(r"[^\d.]", "", value or "")
    try:
        return float(cleaned) if cleaned else 0.0
    except ValueError:
        return 0.0


def parse_quantity(value: str | None) -> int:
    match = re.search(r"\d+", value or "")
    quantity = int(match.group()) if match else 1
    return quantity if quantity > 0 else 1


def _pipe_fields(first_line: str) -> list[str]:
    return [part.strip() for part in first_line.split("|")][1:]


def _colon_fields(lines: list[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for line in lines[1:]:
        match = _KEY_VALUE.match(line)
        if not match:
            continue
        field = _ALIAS_LOOKUP.get(match.group(1).lower())
        if field and field not in fields:
            fields[field] = match.group(2).strip()
    return fields


def _lead(fields: dict[str, str]) -> Command:
    if not (fields.get("name") and fields.get("phone") and fields.get("niche")):
        return Unrecognized("lead", LEAD_HINT)
    prospect_type = (fields.get("type") or "NP").strip().upper()
    if prospect_type not in {"NP", "EP"}:
        return Unrecognized("lead", "Jenis mesti NP atau EP")
    return LeadEntry(
        name=fields["name"],
        phone=fields["phone"],
        niche=fields["niche"],
        prospect_type=prospect_type,
        date=fields.get("date") or None,
    )


def _order(fields: dict[str, str]) -> Command:
    required = ("name", "phone", "address", "postcode", "product")
    if not all(fields.get(name) for name in required):
        return Unrecognized("order", ORDER_HINT)
    return OrderEntry(
        name=fields["name"],
        phone=fields["phone"],
        address=fields["address"],
        postcode=fields["postcode"],
        city=fields.get("city", ""),
        state=fields.get("state", ""),
        product=fields["product"],
        quantity=parse_quantity(fields.get("quantity")),
        price=parse_price(fields.get("price")),
        platform=normalize_platform(fields.get("platform", "")),
        payment_mode=normalize_payment(fields.get("payment")),
    )


_PIPE_LAYOUTS = {
    "lead": ("name", "phone", "niche", "type", "date"),
    "order": ("name", "phone", "address", "postcode", "city", "state", "product", "quantity", "price", "payment"),
    "status": ("phone",),
}
_PIPE_MINIMUM = {"lead": 4, "order": 9, "status": 0}


def parse_command(text: str) -> Command:
    text = (text or "").strip()
    command = detect_command(text)
    if command is None:
        return Unrecognized()

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    first_line = lines[0]
    if "|" in first_line:
        values = _pipe_fields(first_line)
        if len(values) < _PIPE_MINIMUM[command]:
            hint = {"lead": LEAD_HINT, "order": ORDER_HINT, "status": STATUS_HINT}[command]
            return Unrecognized(command, hint)
        fields = {name: value for name, value in zip(_PIPE_LAYOUTS[command], values) if value}
    else:
        fields = _colon_fields(lines)

    if command == "lead":
        return _lead(fields)
    if command == "order":
        return _order(fields)
    return StatusQuery(phone=fields.get("phone") or None)
