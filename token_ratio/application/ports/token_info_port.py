from __future__ import annotations

from typing import Protocol

from token_ratio.domain.entities.token import TokenInfo


class TokenInfoPort(Protocol):
    def get_token_info(self, *, token_address: str) -> TokenInfo:
        ...
