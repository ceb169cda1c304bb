"""
Address: delivery address value and structural validation.

    from bazaar import address as A

    match A.validate_address(addr):
        case Ok(valid): ...
        case Error(e): e.missing_fields  # ("city", "phone")
"""

from bazaar.address._validator import (
    Address,
    InvalidAddress,
    REQUIRED_FIELDS,
    validate_address,
)

__all__ = (
    "Address",
    "InvalidAddress",
    "REQUIRED_FIELDS",
    "validate_address",
)
