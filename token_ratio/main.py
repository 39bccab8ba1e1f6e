from __future__ import annotations

from fastapi import FastAPI

from token_ratio.api.routers.price_ratio import router as price_ratio_router

app = FastAPI(title="Token Ratio API")
app.include_router(price_ratio_router)
