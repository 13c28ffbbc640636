# =============================================================================
# RWS Client -- Body Codec
# =============================================================================
#
# Outgoing bodies are text frames.  Strings are sent as-is; anything else is
# serialized to compact JSON.  The client never inspects the result.
#
# Both encoders produce the same text: non-string dict keys are stringified
# and non-finite floats become null.
# =============================================================================

from __future__ import annotations

import json
import math
from typing import Any

from .errors import RWSEncodeError

try:
    import orjson

    def _json_dumps(obj: Any) -> str:
        return orjson.dumps(obj, option=orjson.OPT_NON_STR_KEYS).decode()

    _ENCODE_ERRORS: tuple[type[Exception], ...] = (orjson.JSONEncodeError, TypeError)

except ImportError:

    def _json_dumps(obj: Any) -> str:
        return json.dumps(_finite(obj), separators=(",", ":"), allow_nan=False)

    _ENCODE_ERRORS = (TypeError, ValueError)


def _finite(obj: Any) -> Any:
    """Replace NaN and infinities with None, recursively."""
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, dict):
        return {k: _finite(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_finite(v) for v in obj]
    return obj


def encode_body(body: Any) -> str:
    """Return the text frame for *body*.

    Raises:
        RWSEncodeError: If *body* is not a string and is not JSON
            serializable.
    """
    if isinstance(body, str):
        return body
    try:
        return _json_dumps(body)
    except _ENCODE_ERRORS as exc:
        raise RWSEncodeError(f"Cannot serialize {type(body).__name__} body: {exc}") from exc
