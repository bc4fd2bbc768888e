"""Convert request validation rules into documented parameters.

Rules follow the pipe-delimited convention, e.g.
``{"email": "required|email", "age": ["integer", "min:18"]}``.
"""

import logging
from typing import Any

from api_doc_gen.docs.naming import humanize
from api_doc_gen.docs.param import Param, ParamType

logger = logging.getLogger(__name__)

_TYPE_TOKENS = (
    (("integer", "int"), ParamType.INTEGER),
    (("numeric",), ParamType.NUMBER),
    (("boolean", "bool"), ParamType.BOOLEAN),
    (("array",), ParamType.ARRAY),
    (("file", "image"), ParamType.FILE),
)


def _tokens(rule: Any) -> list[str]:
    if isinstance(rule, str):
        return [token.strip() for token in rule.split("|") if token.strip()]
    if isinstance(rule, (list, tuple)):
        # rule objects are skipped; only string tokens carry documentation
        return [token.strip() for token in rule if isinstance(token, str)]
    return []


def _number(text: str) -> float | int:
    value = float(text)
    return int(value) if value.is_integer() else value


def rule_to_param(field: str, rule: Any, description: str | None = None) -> Param:
    """Build one Param from one field's rule; malformed rules give a plain optional string."""
    tokens = _tokens(rule)
    param_type = ParamType.STRING
    for names, candidate in _TYPE_TOKENS:
        if any(name in tokens for name in names):
            param_type = candidate
            break

    param = Param.make(field, param_type, description or humanize(field))
    if "required" not in tokens:
        param.optional()

    try:
        for token in tokens:
            if token.startswith("min:"):
                param.set_min(_number(token[4:]))
            elif token.startswith("max:"):
                param.set_max(_number(token[4:]))
            elif token.startswith("in:"):
                param.set_enum(token[3:].split(","))
    except ValueError:
        logger.debug("Malformed rule for %s: %r", field, rule)
        return Param.make(field, ParamType.STRING, description or humanize(field)).optional()
    return param


def rules_to_params(rules: dict[str, Any], description: str | None = None) -> list[Param]:
    """Params for every top-level field; nested ``items.*`` keys are skipped."""
    params = []
    for field, rule in (rules or {}).items():
        if "*" in field:
            continue
        params.append(rule_to_param(field, rule, description))
    return params
