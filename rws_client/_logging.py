# =============================================================================
# RWS Client -- Logging
# =============================================================================
#
# One package logger.  Hosts attach handlers; the library only installs a
# NullHandler so nothing is printed unless logging is configured.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, MutableMapping

logger = logging.getLogger("rws_client")
logger.addHandler(logging.NullHandler())


class TaggedLogger(logging.LoggerAdapter):
    """Prefix every record with ``[tag]`` and expose the tag as ``extra``."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        tag = self.extra["tag"] if self.extra else ""
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("tag", tag)
        kwargs["extra"] = extra
        return f"[{tag}] {msg}", kwargs


def get_logger(tag: str) -> TaggedLogger:
    """Return an adapter over the package logger for one component/client."""
    return TaggedLogger(logger, {"tag": tag})
