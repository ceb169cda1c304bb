from bazaar.address import Address, validate_address

from _support import address, err, ok


def test_valid_address_is_normalized():
    valid = ok(validate_address(address(city="  İstanbul ", postal_code="  ")))
    assert valid.city == "İstanbul"
    assert valid.postal_code is None


def test_postal_code_optional():
    assert ok(validate_address(address(postal_code=None))).postal_code is None


def test_reports_every_missing_field_in_order():
    e = err(validate_address(address(phone="", city="")))
    assert e.missing_fields == ("city", "phone")


def test_whitespace_counts_as_missing():
    e = err(validate_address(address(recipient_name="   ")))
    assert e.missing_fields == ("recipient_name",)


def test_phone_format_not_checked():
    assert ok(validate_address(address(phone="call me"))).phone == "call me"


def test_from_mapping_tolerates_missing_and_none():
    addr = Address.from_mapping({"recipient_name": "Can", "city": None, "phone": 5551234})
    assert addr.phone == "5551234"
    e = err(validate_address(addr))
    assert e.missing_fields == ("full_address", "city")
