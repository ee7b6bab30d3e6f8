from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypedDict

logger = logging.getLogger(__name__)


class MediaObjectParams(TypedDict, total=False):
    """Construction parameters of a :class:`~mediaproxy.MediaObject`.

    Both options configure behaviour of the object on the media server and
    are never changed locally once the proxy exists.
    """

    collect_on_unreferenced: bool
    """Whether the server may collect the object once nothing references it."""

    garbage_collector_period: int
    """Period, in seconds, of the server-side garbage collector for this object."""


class ParamSchema(TypedDict):
    """One entry of :data:`PARAMS_SCHEME`."""

    name: str
    """Local (snake_case) attribute name."""

    type: str
    """Remote schema type name."""

    python_type: type


# Keyed by the name the media server uses on the wire.
PARAMS_SCHEME: dict[str, ParamSchema] = {
    "collectOnUnreferenced": {
        "name": "collect_on_unreferenced",
        "type": "boolean",
        "python_type": bool,
    },
    "garbageCollectorPeriod": {
        "name": "garbage_collector_period",
        "type": "integer",
        "python_type": int,
    },
}

_LOCAL_SCHEME: dict[str, ParamSchema] = {spec["name"]: spec for spec in PARAMS_SCHEME.values()}

PARAM_NAMES = frozenset(_LOCAL_SCHEME)


def validate_params(params: Mapping[str, Any] | None) -> MediaObjectParams:
    """Validate construction parameters against :data:`PARAMS_SCHEME`.

    Returns a new dict holding only the given options.

    Raises:
        ValueError: If an option is not part of the schema.
        TypeError: If an option has the wrong type.
    """
    if params is None:
        return {}

    unknown = sorted(set(params) - PARAM_NAMES)
    if unknown:
        raise ValueError(
            f"Unknown media object parameter(s): {', '.join(unknown)}. "
            f"Valid parameters are: {', '.join(sorted(PARAM_NAMES))}"
        )

    validated: dict[str, Any] = {}
    for name, value in params.items():
        spec = _LOCAL_SCHEME[name]
        expected = spec["python_type"]
        # bool is an int subclass; an integer option must not accept True/False
        if expected is int and isinstance(value, bool):
            raise TypeError(f"{name} must be an {spec['type']}, got bool")
        if not isinstance(value, expected):
            raise TypeError(
                f"{name} must be a {spec['type']}, got {type(value).__name__}"
            )
        if name == "garbage_collector_period" and value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")
        validated[name] = value
    return validated  # type: ignore[return-value]


def params_from_remote(raw: Mapping[str, Any]) -> MediaObjectParams:
    """Translate server-reported (camelCase) parameters and validate them."""
    translated: dict[str, Any] = {}
    for key, value in raw.items():
        spec = PARAMS_SCHEME.get(key)
        if spec is None:
            raise ValueError(f"Unknown remote media object parameter: {key}")
        translated[spec["name"]] = value
    logger.debug("Translated remote params %s", sorted(translated))
    return validate_params(translated)
