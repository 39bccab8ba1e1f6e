from __future__ import annotations

from typing import Protocol


class CurrentPricePort(Protocol):
    def fetch_current_price(self, *, token_address: str) -> float:
        ...
