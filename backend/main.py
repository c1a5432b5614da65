"""
Base Yield Strategy Review API
FastAPI backend serving daily Base / Aerodrome strategy reviews
"""

import os
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.strategy_router import router as strategy_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("StrategyAPI")

app = FastAPI(
    title="Base Yield Strategy Review API",
    description="Opportunity selection and recommended actions for Base yield pools",
    version="1.0.0"
)

app.include_router(strategy_router)

# CORS - restrict origins in production
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if os.environ.get("PRODUCTION") else ["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)


@app.get("/health")
async def health():
    return {"status": "ok", "service": "base-yield-strategy-review"}


# ============================================
# RUN
# ============================================

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    logger.info(f"Starting on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port)
