"""
FastAPI application for University Search.

Run as a script:
    python app/app.py

Or as a module:
    uvicorn app.app:app --reload

Endpoints:
    GET  /api/universities               → full catalog
    GET  /api/universities/search?q=...  → up to 10 name/city/country matches
    GET  /api/universities/{slug}        → one university, 404 if unknown
    POST /api/chat                       → {"message": str, "history": [...]}
                                           returns {"message": str}
    GET  /api/health

Errors are JSON {"message": ...}; chat failures also carry "kind"
(configuration | timeout | upstream).

Logs each request and wall-clock response time to stdout and logs/app.log
(rotating, 5 MB max, 3 backups).
"""

import asyncio
import logging
import logging.handlers
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

# Ensure project root is on sys.path when running as a script (python app/app.py)
sys.path.insert(0, str(Path(__file__).parent.parent))

from advisor.chat import ChatError, ChatProxy
from app import config
from catalog.models import University
from catalog.store import CatalogStore

LOG_DIR  = Path(__file__).parent.parent / "logs"
LOG_FILE = LOG_DIR / "app.log"

# How often a pending chat request checks whether the client went away.
DISCONNECT_POLL_SECONDS = 0.5

def _setup_logging() -> None:
    LOG_DIR.mkdir(exist_ok=True)
    fmt = logging.Formatter("%(asctime)s  %(levelname)s  %(message)s")

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(fmt)

    # Rotate at 5 MB, keep 3 backups
    rotating = logging.handlers.RotatingFileHandler(
        LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    rotating.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(stream)
    root.addHandler(rotating)

_setup_logging()
log = logging.getLogger("api")


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class ChatRequest(BaseModel):
    message: str | None = None
    history: list[dict[str, Any]] | None = None


class ChatResponse(BaseModel):
    message: str


def _error(status: int, message: str, **extra: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"message": message, **extra})


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_store(request: Request) -> CatalogStore:
    return request.app.state.store


def get_advisor(request: Request) -> ChatProxy:
    return request.app.state.advisor


async def _until_disconnect(request: Request, task: asyncio.Task) -> bool:
    """Wait for `task`; cancel it and return False if the client disconnects first."""
    while not task.done():
        done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
        if not done and await request.is_disconnected():
            task.cancel()
            return False
    return True


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(store: CatalogStore | None = None, advisor: ChatProxy | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.store is None:
            log.info("Loading universities from %s…", config.UNIVERSITIES_FILE)
            app.state.store = CatalogStore.load(config.UNIVERSITIES_FILE)
        log.info("  %d universities loaded.", len(app.state.store))

        if app.state.advisor is None:
            app.state.advisor = ChatProxy(
                model=config.OPENAI_MODEL,
                max_tokens=config.CHAT_MAX_TOKENS,
                timeout=config.CHAT_TIMEOUT_SECONDS,
            )
        if not app.state.advisor.configured:
            log.warning("  OPENAI_API_KEY not set — AI advisor requests will fail.")

        yield  # server runs here

    app = FastAPI(title="University Search", lifespan=lifespan)
    app.state.store = store
    app.state.advisor = advisor

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies are a client error, reported like the blank-message case."""
        return _error(400, f"Invalid data format: {exc}")

    # -----------------------------------------------------------------------
    # Endpoints
    # -----------------------------------------------------------------------

    @app.get("/api/health")
    def health(store: CatalogStore = Depends(get_store), advisor: ChatProxy = Depends(get_advisor)):
        return {"status": "ok", "universities": len(store), "chat": advisor.configured}

    @app.get("/api/universities", response_model=list[University])
    def list_universities(store: CatalogStore = Depends(get_store)):
        try:
            return store.list_all()
        except Exception:
            log.exception("Error fetching universities")
            return _error(500, "Failed to fetch universities")

    # Declared before /{slug} so "search" is not taken for a slug.
    @app.get("/api/universities/search", response_model=list[University])
    def search_universities(q: str = "", store: CatalogStore = Depends(get_store)):
        t0 = time.perf_counter()
        try:
            results = store.search(q)
        except Exception:
            log.exception("Error searching universities")
            return _error(500, "Failed to search universities")
        log.info("search q=%r  hits=%d  %.3fs", q, len(results), time.perf_counter() - t0)
        return results

    @app.get("/api/universities/{slug}", response_model=University)
    def get_university(slug: str, store: CatalogStore = Depends(get_store)):
        try:
            university = store.get_by_slug(slug)
        except Exception:
            log.exception("Error fetching university %r", slug)
            return _error(500, "Failed to fetch university")
        if university is None:
            log.info("slug=%r  not found", slug)
            return _error(404, "University not found")
        return university

    @app.post("/api/chat", response_model=ChatResponse)
    async def chat(
        req: ChatRequest,
        request: Request,
        advisor: ChatProxy = Depends(get_advisor),
    ):
        if not req.message or not req.message.strip():
            return _error(400, "Message is required")

        t0 = time.perf_counter()
        log.info("chat  history=%d  message=%r", len(req.history or []), req.message[:80])

        task = asyncio.ensure_future(advisor.complete(req.message, req.history or []))
        try:
            finished = await _until_disconnect(request, task)
            if not finished:
                log.info("chat  client disconnected — upstream call cancelled")
                return Response(status_code=499)
            reply = task.result()
        except ChatError as exc:
            log.error("Error generating AI response (%s): %s", exc.kind.value, exc.message)
            return _error(500, exc.message, kind=exc.kind.value)
        except Exception as exc:
            log.exception("Error generating AI response")
            return _error(500, str(exc) or "Failed to generate AI response", kind="upstream")

        log.info("chat  reply=%d chars  %.2fs", len(reply), time.perf_counter() - t0)
        return ChatResponse(message=reply)

    return app


app = create_app()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _launch_server() -> None:
    server_config = uvicorn.Config(app, host=config.HOST, port=config.PORT, reload=False)
    server = uvicorn.Server(server_config)

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        uvicorn.run(app, host=config.HOST, port=config.PORT, reload=False)
        return

    log.warning(
        "Detected an existing asyncio event loop; serving with create_task() instead of asyncio.run()."
    )
    asyncio.create_task(server.serve())


if __name__ == "__main__":
    log.info("=== University Search — launching server on http://%s:%d ===", config.HOST, config.PORT)
    _launch_server()
