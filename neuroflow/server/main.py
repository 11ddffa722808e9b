"""
NeuroFlow compiler service — FastAPI app exposing graph import and codegen.

Start with:
    python -m neuroflow.server.main

Or via uvicorn directly:
    uvicorn neuroflow.server.main:app --port 3001 --reload

Configuration (environment or a .env file in the working directory):
    NEUROFLOW_HOST          bind address            (default 0.0.0.0)
    NEUROFLOW_PORT          bind port               (default 3001)
    NEUROFLOW_LOG_LEVEL     logging level name      (default INFO)
    NEUROFLOW_CORS_ORIGINS  comma-separated origins (default *)
    NEUROFLOW_GRAPH         graph JSON loaded at start-up (optional)
"""
from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

# Load .env before anything reads the environment (state.py reads
# NEUROFLOW_GRAPH at import time).
load_dotenv()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from neuroflow.server.routes.graph_routes import router  # noqa: E402

logging.basicConfig(
    level=os.environ.get("NEUROFLOW_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title="NeuroFlow Compiler API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.environ.get("NEUROFLOW_CORS_ORIGINS", "*").split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run() -> None:
    import uvicorn

    uvicorn.run(
        "neuroflow.server.main:app",
        host=os.environ.get("NEUROFLOW_HOST", "0.0.0.0"),
        port=int(os.environ.get("NEUROFLOW_PORT", "3001")),
    )


if __name__ == "__main__":
    run()
