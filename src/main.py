# src/main.py

from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from src.config import Settings, log, settings, setup_logging
from src.core.errors import ScribeError
from src.core.orchestrator import ChatOrchestrator
from src.core.security import ClerkAuthGate, get_current_user_id
from src.models.chat_models import ChatRequest, ChatResponse, ClerkKeyResponse, EmbedUrlResponse, ErrorResponse
from src.modules.gemini_client import ModelGateway
from src.modules.persona_client import PersonaLoader

setup_logging(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.orchestrator.model_gateway.aclose()


app = FastAPI(
    lifespan=lifespan,
    title="Aura Scribe Backend",
    description="Chat relay between the Aura Scribe symptom tracker and Gemini, behind Clerk authentication."
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# --- COMPONENTS (one Settings instance shared by all of them) ---
app.state.settings = settings
app.state.auth_gate = ClerkAuthGate(settings)
app.state.orchestrator = ChatOrchestrator(settings, PersonaLoader(settings), ModelGateway(settings))

if Path(settings.STATIC_DIR).is_dir():
    app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_orchestrator(request: Request) -> ChatOrchestrator:
    return request.app.state.orchestrator


# --- ERROR HANDLING ---

@app.exception_handler(ScribeError)
async def scribe_error_handler(request: Request, exc: ScribeError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    log.warning(f"Malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"error": "Malformed request body."},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all: log and answer with a 500 `{"error"}` body."""
    log.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Sorry, an internal error occurred."},
    )


# --- PAGES ---

def _page(settings: Settings, filename: str):
    page = Path(settings.STATIC_DIR) / filename
    if not page.is_file():
        log.error(f"Page not found on disk: {page}")
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Page not found."})
    return FileResponse(page)


@app.get("/", include_in_schema=False)
def landing_page(settings: Settings = Depends(get_settings)):
    return _page(settings, "landing.html")


@app.get("/app", include_in_schema=False)
def app_page(settings: Settings = Depends(get_settings)):
    return _page(settings, "app.html")


# --- API ENDPOINTS ---

@app.get("/status", tags=["Status"])
def read_status():
    return {"status": "ok", "message": "Aura Scribe backend running."}


@app.get("/api/clerk-key", response_model=ClerkKeyResponse, responses={500: {"model": ErrorResponse}}, tags=["Config"])
def clerk_key(settings: Settings = Depends(get_settings)):
    """Public Clerk publishable key for the browser."""
    if not settings.CLERK_PUBLISHABLE_KEY:
        log.error("CLERK_PUBLISHABLE_KEY is not configured.")
        return JSONResponse(status_code=500, content={"error": "Clerk key missing"})
    return ClerkKeyResponse(key=settings.CLERK_PUBLISHABLE_KEY)


@app.get("/api/embed-url", response_model=EmbedUrlResponse, responses={500: {"model": ErrorResponse}}, tags=["Config"])
def embed_url(settings: Settings = Depends(get_settings)):
    if not settings.EMBED_URL:
        log.error("EMBED_URL is not configured.")
        return JSONResponse(status_code=500, content={"error": "Embed URL missing"})
    return EmbedUrlResponse(url=settings.EMBED_URL)


@app.post(
    "/api/chat",
    response_model=ChatResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Chat"],
)
async def chat_handler(
    chat_request: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
):
    """Runs one chat turn with the Scribe for the signed-in user."""
    log.info(f"Chat turn for user {user_id} ({len(chat_request.history)} prior turns)")
    try:
        return await orchestrator.handle(chat_request, user_id)
    except ScribeError:
        raise
    except Exception as e:
        log.error(f"Unexpected error during chat for user {user_id}: {e}", exc_info=True)
        raise ScribeError("Sorry, an internal error occurred while generating the response.") from e


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
