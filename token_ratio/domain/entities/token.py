from __future__ import annotations

from dataclasses import dataclass


UNKNOWN_TOKEN_NAME = "Unknown Token"
UNKNOWN_TOKEN_SYMBOL = "???"


@dataclass(frozen=True)
class TokenInfo:
    name: str = UNKNOWN_TOKEN_NAME
    symbol: str = UNKNOWN_TOKEN_SYMBOL

    @property
    def display_name(self) -> str:
        if self.name != UNKNOWN_TOKEN_NAME:
            return f"{self.name} ({self.symbol})"
        return self.symbol
