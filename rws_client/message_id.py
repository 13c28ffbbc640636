# =============================================================================
# RWS Client -- Message Id Generator
# =============================================================================

from __future__ import annotations

import re
from itertools import count

from .constants import DEFAULT_ID_PREFIX

_WHITESPACE = re.compile(r"\s")


def kebab_case(value: str) -> str:
    """Lower-case *value* and replace every whitespace character with ``-``."""
    return _WHITESPACE.sub("-", value.lower())


class IdGenerator:
    """Issue message ids that are unique for the lifetime of the generator.

    Ids look like ``"<scope>-<n>"`` with the scope normalized by
    :func:`kebab_case`, or ``"message-id-<n>"`` when no scope is given.
    The counter is shared by all scopes of one generator, so two different
    scopes never receive the same number.
    """

    def __init__(self, start: int = 1) -> None:
        self._counter = count(start)

    def next(self, scope: str | None = None) -> str:
        n = next(self._counter)
        if scope and scope.strip():
            return f"{kebab_case(scope.strip())}-{n}"
        return f"{DEFAULT_ID_PREFIX}-{n}"
