# src/taskdeck/core/confirm.py

"""
Two-phase delete confirmation.

    token = engine.request_delete(item_id)   # phase 1: ask
    engine.confirm_delete(token)             # phase 2: yes (token spent on success)
    engine.cancel_delete(token)              # phase 2: no

Tokens are single-use and only valid on the gate that issued them.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from ..errors import ConfirmationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConfirmationToken:
    token: str
    scope: str
    item_id: str | int
    prompt: str


class ConfirmationGate:
    def __init__(self, scope: str) -> None:
        self._scope = scope
        self._pending: dict[str, ConfirmationToken] = {}

    def request(self, item_id: str | int, prompt: str) -> ConfirmationToken:
        tok = ConfirmationToken(
            token=secrets.token_hex(4),
            scope=self._scope,
            item_id=item_id,
            prompt=prompt,
        )
        self._pending[tok.token] = tok
        logger.debug("Confirmation requested scope=%s item=%s token=%s", self._scope, item_id, tok.token)
        return tok

    def resolve(self, token: ConfirmationToken | str) -> str | int:
        """
        Return the item id a pending token was issued for.

        The token stays pending until discard(), so a delete that fails to
        persist can be confirmed again with the same token.
        """
        key = token.token if isinstance(token, ConfirmationToken) else str(token)
        if isinstance(token, ConfirmationToken) and token.scope != self._scope:
            raise ConfirmationError(f"Token {key} belongs to {token.scope}, not {self._scope}")
        tok = self._pending.get(key)
        if tok is None:
            raise ConfirmationError(f"Unknown or already used confirmation token: {key}")
        return tok.item_id

    def discard(self, token: ConfirmationToken | str) -> bool:
        key = token.token if isinstance(token, ConfirmationToken) else str(token)
        return self._pending.pop(key, None) is not None
