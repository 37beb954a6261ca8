"""Turn security schemes and requirements into header parameters.

Only header-based schemes become parameters: an operation protected by an
``apiKey`` in a query string gets no extra request field.  HTTP schemes
(OpenAPI 3 ``http``, Swagger 2 ``basic``) and any scheme tagged
``x-auth-scheme: bearer`` are always sent in ``Authorization``, whatever
name they declare.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specgen.models import AuthHeaderParameterInfo, ParameterLocation

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"

_TOKEN_TYPES = {
    "apiKey": "apiKey",
    "basic": "basic",
    "oauth2": "oauth2",
}

_AUTHORIZATION_TYPES = ("http", "basic")


def _requested_scheme_names(
    schemes: dict[str, Any], security: Optional[list[dict[str, Any]]]
) -> list[str]:
    if security is None:
        return list(schemes)
    names: list[str] = []
    for requirement in security:
        if not isinstance(requirement, dict) or not requirement:
            continue
        if len(requirement) > 1:
            logger.warning(
                "Security requirement %s combines several schemes; using %r only",
                sorted(requirement),
                next(iter(requirement)),
            )
        name = next(iter(requirement))
        if name not in names:
            names.append(name)
    return names


def _uses_authorization(scheme: dict[str, Any]) -> bool:
    return (
        scheme.get("type") in _AUTHORIZATION_TYPES
        or str(scheme.get("scheme", "")).lower() == "bearer"
        or scheme.get("x-auth-scheme") == "bearer"
    )


def _token_type(scheme: dict[str, Any]) -> str:
    scheme_type = scheme.get("type", "")
    if scheme_type == "http":
        return "basic" if str(scheme.get("scheme", "")).lower() == "basic" else "apiKey"
    return _TOKEN_TYPES.get(scheme_type, scheme_type)


def _auth_scheme(scheme: dict[str, Any]) -> str:
    if "x-auth-scheme" in scheme:
        return str(scheme["x-auth-scheme"])
    if "scheme" in scheme:
        return str(scheme["scheme"]).lower()
    if scheme.get("type") == "basic":
        return "basic"
    return "none"


def get_auth_headers(
    schemes: dict[str, Any],
    security: Optional[list[dict[str, Any]]] = None,
) -> list[AuthHeaderParameterInfo]:
    """Compute the auth header parameters for a set of requirements.

    Args:
        schemes: The security scheme registry (name -> scheme object).
        security: Security requirement objects.  ``None`` means "not
            declared" and selects every scheme in *schemes*; an empty list
            means "no authentication".  Only the first scheme of each
            requirement object is considered.

    Returns:
        One :class:`~specgen.models.AuthHeaderParameterInfo` per selected
        header-based scheme, in requirement order.  Neither argument is
        modified.
    """
    headers: list[AuthHeaderParameterInfo] = []
    for name in _requested_scheme_names(schemes, security):
        scheme = schemes.get(name)
        if not isinstance(scheme, dict):
            logger.warning("Security requirement %r names an undeclared scheme", name)
            continue

        if _uses_authorization(scheme):
            header_name = AUTHORIZATION_HEADER
        elif scheme.get("in") == ParameterLocation.HEADER.value:
            header_name = scheme.get("name", name)
        else:
            continue

        headers.append(
            AuthHeaderParameterInfo(
                name=name,
                type="string",
                location=ParameterLocation.HEADER.value,
                header_name=header_name,
                token_type=_token_type(scheme),
                auth_scheme=_auth_scheme(scheme),
            )
        )
    return headers
