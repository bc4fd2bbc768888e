"""String helpers for endpoint names, groups and identifiers."""

import re

_IRREGULAR = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "foot": "feet",
    "tooth": "teeth",
}
_UNCOUNTABLE = {"data", "info", "information", "media", "metadata", "news", "equipment", "feedback", "misc", "series"}


def ucfirst(value: str) -> str:
    return value[:1].upper() + value[1:]


def lcfirst(value: str) -> str:
    return value[:1].lower() + value[1:]


def ucwords(value: str) -> str:
    return re.sub(r"(^|\s)(\S)", lambda m: m.group(1) + m.group(2).upper(), value)


def humanize(field: str) -> str:
    """``first_name`` -> ``First name``."""
    return ucfirst(field.replace("_", " "))


def snake(value: str) -> str:
    """``Default Headers`` -> ``default_headers``."""
    if value.islower() and " " not in value:
        return value
    value = re.sub(r"\s+", "", ucwords(value))
    return re.sub(r"(.)(?=[A-Z])", r"\1_", value).lower()


def studly(value: str) -> str:
    """``user_profile`` -> ``UserProfile``."""
    return "".join(ucfirst(part) for part in re.split(r"[\s_\-]+", value) if part)


def _match_case(word: str, template: str) -> str:
    if template.isupper() and len(template) > 1:
        return word.upper()
    if template[:1].isupper():
        return ucfirst(word)
    return word


def plural(word: str) -> str:
    lower = word.lower()
    if not word or lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR:
        return _match_case(_IRREGULAR[lower], word)
    if lower in _IRREGULAR.values():
        return word
    if re.search(r"[^aeiou]y$", lower):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", lower):
        if lower.endswith("s") and not lower.endswith(("ss", "us", "is")):
            return word
        return word + "es"
    return word + "s"


def singular(word: str) -> str:
    lower = word.lower()
    if not word or lower in _UNCOUNTABLE:
        return word
    for one, many in _IRREGULAR.items():
        if lower == many:
            return _match_case(one, word)
    if lower.endswith(("ss", "us", "is")):
        return word
    if lower.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if re.search(r"(sses|xes|zes|ches|shes)$", lower):
        return word[:-2]
    if lower.endswith("s"):
        return word[:-1]
    return word


def group_from_class(class_name: str) -> str:
    """``UserController`` -> ``User``."""
    return class_name.replace("Controller", "")


def synthesize_default_name(method: str, group: str | None, action: str | None = None) -> str:
    """Name an endpoint from its HTTP method and group when nothing else names it."""
    item = singular(group or "Item")
    method = (method or "").lower()
    if method == "post":
        return f"Create a {item}"
    if method == "delete":
        return f"Delete a {item}"
    if method in ("put", "patch"):
        return f"Update a {item}"
    if method == "get" and action:
        action = action.lower()
        name = f"Get a {item}"
        if "search" in action:
            name = f"List {plural(item)}"
        if "index" in action:
            name = f"Search {item}"
        return name
    return f"Get a {item}"


def operation_id(group: str | None, name: str | None) -> str:
    """``User Accounts`` + ``Get a user`` -> ``userAccountsGetauser``."""
    group_part = lcfirst(ucwords(group or "api").replace(" ", ""))
    name_part = ucfirst((name or "operation").replace(" ", ""))
    return group_part + name_part


def variable_name(header: str) -> str:
    """Postman variable name for a header: ``X-Api-Key`` -> ``x_api_key``."""
    return re.sub(r"[\s\-]+", "_", header.strip()).lower()


def security_scheme_name(header: str) -> str:
    """``x-api-key`` -> ``apiKey``."""
    name = re.sub(r"^x-", "", header, flags=re.IGNORECASE)
    name = ucwords(re.sub(r"[\-_]", " ", name)).replace(" ", "")
    return lcfirst(name)
