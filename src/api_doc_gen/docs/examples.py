"""Deterministic example values guessed from field names and types."""

import copy
from typing import Any

_BY_NAME_FRAGMENT = (
    ("email", "user@example.com"),
    ("full_name", "John Doe"),
    ("first_name", "John"),
    ("last_name", "Doe"),
    ("phone", "+1234567890"),
    ("address", "221B Baker Street"),
    ("city", "London"),
    ("country", "United Kingdom"),
    ("zip", "12345"),
    ("postal", "12345"),
    ("url", "https://example.com"),
    ("link", "https://example.com"),
    ("uuid", "3fa85f64-5717-4562-b3fc-2c963f66afa6"),
    ("ip_address", "192.168.0.1"),
    ("image", "https://example.com/image.png"),
    ("avatar", "https://example.com/image.png"),
    ("password", "secret123"),
)

_BY_TYPE = {
    "integer": 1,
    "number": 1.5,
    "boolean": True,
    "array": [],
    "object": {},
}


class ExampleGenerator:
    """Produces stable sample values so repeated runs render identical documents."""

    def for_field(self, name: str, type_name: str = "string") -> Any:
        name = name.lower()
        if name == "name":
            return "John Doe"
        if name == "title":
            return "Sample title"
        for fragment, value in _BY_NAME_FRAGMENT:
            if fragment in name:
                return value
        if name == "id":
            return 1
        if name.endswith("_id"):
            return 1
        if name.endswith("_at") or "date" in name:
            return "2024-01-01 12:00:00"
        if type_name in _BY_TYPE:
            return copy.deepcopy(_BY_TYPE[type_name])
        if "description" in name or "content" in name:
            return "Lorem ipsum dolor sit amet."
        return "string_value"
