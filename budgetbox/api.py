"""HTTP service storing the latest budget per email.

Run with ``python -m budgetbox.api`` or ``uvicorn budgetbox.api:app``.
"""

from __future__ import annotations

import base64
import logging
import threading
import time
from typing import Dict, Optional

from fastapi import FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import config
from .models import utc_now_iso
from .records import BudgetRecord, RecordStore, build_record_store
from .schemas import (
    HealthResponse,
    LatestResponse,
    LoginRequest,
    LoginResponse,
    SyncRequest,
    SyncResponse,
)

logger = logging.getLogger(__name__)


class TokenRegistry:
    """Maps issued bearer tokens to the email they were issued for.  Tokens never expire."""

    def __init__(self) -> None:
        self._tokens: Dict[str, str] = {}
        self._lock = threading.Lock()

    def issue(self, email: str) -> str:
        raw = f"{email}:{int(time.time() * 1000)}"
        token = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        with self._lock:
            self._tokens[token] = email
        return token

    def lookup(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        with self._lock:
            return self._tokens.get(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


def _bearer_token(authorization: Optional[str]) -> str:
    return (authorization or "").replace("Bearer ", "", 1).strip()


def create_app(
    records: Optional[RecordStore] = None,
    tokens: Optional[TokenRegistry] = None,
    demo_email: str = config.DEMO_EMAIL,
    demo_password: str = config.DEMO_PASSWORD,
    require_auth: bool = config.REQUIRE_AUTH,
) -> FastAPI:
    app = FastAPI(title="BudgetBox API")
    app.state.records = records if records is not None else build_record_store()
    app.state.tokens = tokens if tokens is not None else TokenRegistry()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Errors ----------

    @app.exception_handler(HTTPException)
    async def http_error(_request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=400,
            content={"error": f"{location}: {message}" if location else message},
        )

    # ---------- Health ----------

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(ok=True, service=config.SERVICE_NAME)

    # ---------- Auth ----------

    @app.post("/auth/login", response_model=LoginResponse)
    def login(payload: LoginRequest):
        if payload.email == demo_email and payload.password == demo_password:
            token = app.state.tokens.issue(payload.email)
            logger.info("Issued token for %s", payload.email)
            return LoginResponse(token=token, email=payload.email)
        logger.info("Rejected login for %s", payload.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    # ---------- Budgets ----------

    @app.post("/budget/sync", response_model=SyncResponse)
    def sync_budget(payload: SyncRequest, authorization: Optional[str] = Header(default=None)):
        tokens: TokenRegistry = app.state.tokens
        token_email = tokens.lookup(_bearer_token(authorization))

        email = payload.email if payload.email is not None else token_email
        if not email:
            raise HTTPException(status_code=400, detail="Email is required")
        if require_auth and token_email is None:
            raise HTTPException(status_code=401, detail="Valid bearer token required")
        if len(tokens) and token_email and token_email != email:
            raise HTTPException(status_code=403, detail="Token does not match email")
        if payload.budget is None:
            raise HTTPException(status_code=400, detail="Budget payload missing")

        updated_at = utc_now_iso()
        app.state.records.save(BudgetRecord(email=email, budget=payload.budget.to_wire(), updated_at=updated_at))
        logger.info("Saved budget for %s", email)
        return SyncResponse(success=True, timestamp=updated_at)

    @app.get("/budget/latest", response_model=LatestResponse, response_model_by_alias=True)
    def latest_budget(email: Optional[str] = Query(default=None)):
        record = app.state.records.latest(demo_email if email is None else email)
        if record is None:
            return LatestResponse(budget=None, updated_at=None)
        return LatestResponse(budget=record.budget, updated_at=record.updated_at)

    return app


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    logger.info("BudgetBox backend listening on http://localhost:%s", config.PORT)
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    main()
