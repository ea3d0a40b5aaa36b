"""
KBQA - Web API Server
----------------------
FastAPI server that wraps the KnowledgeBaseService.

Endpoints:
  GET  /api/health    -> service status and generation availability
  GET  /api/status    -> current index size
  POST /api/ingest    -> rebuild the index from the corpus + uploads
  POST /api/search    -> ranked chunks for a question
  POST /api/ask       -> source-attributed answer with confidence
  POST /api/upload    -> store uploaded documents for the next ingest

Run from the project root:
    uvicorn app.server:app --reload --port 8000

The corpus and upload directories are resolved relative to CWD unless
configured with absolute paths.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from functools import partial
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from kbqa.errors import InvalidInput
from kbqa.serving.pipeline import KnowledgeBaseService

load_dotenv()

# ---------------------------------------------------------------------------
# Service singleton
# ---------------------------------------------------------------------------

_service: Optional[KnowledgeBaseService] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service once at startup; drop it on shutdown."""
    global _service
    from kbqa.config import load_settings
    from kbqa.utils.logger import setup_logger

    settings = load_settings()
    setup_logger(settings.logging.level, settings.logging.file)
    _service = KnowledgeBaseService.from_settings(settings)
    logger.info("[Server] Service ready (index is empty until POST /api/ingest)")
    yield
    _service = None
    logger.info("[Server] Service unloaded.")


def get_service() -> KnowledgeBaseService:
    if _service is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return _service


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="KBQA API",
    description="Lexical retrieval and source-attributed answers over a document corpus",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class SearchRequest(BaseModel):
    # Blank/missing questions are rejected by the service, not the model
    question: Optional[str] = None
    top_k: Optional[int] = None


class AskRequest(SearchRequest):
    industry: Optional[str] = None
    scenario: Optional[str] = None
    use_external_generation: bool = False


class ResultModel(BaseModel):
    id: str
    source: str
    chunk_index: int
    text: str
    score: float


class SearchResponse(BaseModel):
    results: list[ResultModel]


class AskResponse(BaseModel):
    answer: str
    sources: list[ResultModel]
    confidence: float
    generated: bool
    model: str


class IndexedResponse(BaseModel):
    ok: bool = True
    indexed: int


class UploadResponse(BaseModel):
    ok: bool = True
    uploaded: int


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

async def _run_blocking(fn, *args, **kwargs):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(fn, *args, **kwargs))


@app.get("/api/health")
async def health(service: KnowledgeBaseService = Depends(get_service)):
    return {
        "status": "ok",
        "indexed": service.status()["indexed"],
        "generation_enabled": service.generation_enabled,
    }


@app.get("/api/status", response_model=IndexedResponse)
async def status(service: KnowledgeBaseService = Depends(get_service)):
    return IndexedResponse(indexed=service.status()["indexed"])


@app.post("/api/ingest", response_model=IndexedResponse)
async def ingest(service: KnowledgeBaseService = Depends(get_service)):
    report = await _run_blocking(service.ingest)
    return IndexedResponse(indexed=report.indexed)


@app.post("/api/search", response_model=SearchResponse)
async def search(request: SearchRequest, service: KnowledgeBaseService = Depends(get_service)):
    ranked = await _run_blocking(service.search, request.question, request.top_k)
    return SearchResponse(results=[ResultModel(**r.to_result()) for r in ranked])


@app.post("/api/ask", response_model=AskResponse)
async def ask(request: AskRequest, service: KnowledgeBaseService = Depends(get_service)):
    """
    Answer a question from the indexed corpus.

    industry / scenario are passed through to the generation prompt only.
    A failing or unconfigured generator never turns into an error here.
    """
    result = await _run_blocking(
        service.ask,
        request.question,
        industry=request.industry,
        scenario=request.scenario,
        top_k=request.top_k,
        use_external_generation=request.use_external_generation,
    )
    payload = result.to_dict()
    return AskResponse(
        answer=payload["answer"],
        sources=[ResultModel(**s) for s in payload["sources"]],
        confidence=payload["confidence"],
        generated=payload["generated"],
        model=payload["model"],
    )


@app.post("/api/upload", response_model=UploadResponse)
async def upload(
    files: Optional[list[UploadFile]] = File(None),
    service: KnowledgeBaseService = Depends(get_service),
):
    """Store uploaded documents.  They are picked up by the next ingest."""
    if not files:
        raise HTTPException(status_code=400, detail="no files uploaded")
    if service.uploads is None:
        raise HTTPException(status_code=503, detail="Uploads are not configured")

    for f in files:
        data = await f.read()
        await _run_blocking(service.uploads.save, f.filename or "upload.txt", data)

    logger.info(f"[API] Upload | {len(files)} file(s)")
    return UploadResponse(uploaded=len(files))
