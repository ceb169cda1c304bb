"""Delivery address and its required-field rules."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kungfu import Result, Ok, Error


REQUIRED_FIELDS = ("recipient_name", "full_address", "city", "phone")


@dataclass(frozen=True, slots=True)
class Address:
    recipient_name: str
    full_address: str
    city: str
    phone: str
    postal_code: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Address:
        """Build from a loosely-typed payload; missing keys become empty strings."""

        def text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        postal = data.get("postal_code")
        return cls(
            recipient_name=text("recipient_name"),
            full_address=text("full_address"),
            city=text("city"),
            phone=text("phone"),
            postal_code=None if postal is None else str(postal),
        )

    def normalized(self) -> Address:
        postal = (self.postal_code or "").strip()
        return Address(
            recipient_name=self.recipient_name.strip(),
            full_address=self.full_address.strip(),
            city=self.city.strip(),
            phone=self.phone.strip(),
            postal_code=postal or None,
        )


@dataclass(frozen=True, slots=True)
class InvalidAddress:
    """Every required field that was absent or blank, in declaration order."""

    missing_fields: tuple[str, ...]


def validate_address(address: Address) -> Result[Address, InvalidAddress]:
    """
    Check presence of every required field.

    Returns the whitespace-normalized address on success. Phone format is
    not checked here, only presence.
    """
    missing = tuple(
        name
        for name in REQUIRED_FIELDS
        if not isinstance(getattr(address, name), str) or not getattr(address, name).strip()
    )
    if missing:
        return Error(InvalidAddress(missing))
    return Ok(address.normalized())


__all__ = (
    "Address",
    "InvalidAddress",
    "REQUIRED_FIELDS",
    "validate_address",
)
