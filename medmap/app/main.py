import logging
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from . import config
from .exceptions import (
    DocumentError,
    ExportError,
    MedMapError,
    NodeBusyError,
    NodeChangedError,
    NodeNotFoundError,
    SessionNotFoundError,
)
from .logger_config import configure_loggers
from .schemas.graph import EdgeCreate, LabelUpdate, MindMapDocument
from .schemas.verification import Verification
from .services.document_reader import extract_text
from .services.evidence import EvidenceFetcher
from .services.exporter import export_jpeg, export_pdf
from .services.fact_checker import FactChecker
from .services.llm_client import LLMClient
from .services.mind_map_generator import MindMapGenerator
from .services.session_store import SessionStore

configure_loggers()
logger = logging.getLogger("medmap.api")

app = FastAPI(title="MedMap")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

EXPORT_FORMATS = {
    "pdf": (export_pdf, "application/pdf", "mindmap.pdf"),
    "jpeg": (export_jpeg, "image/jpeg", "mindmap.jpeg"),
}


# --- Dependencies ---

@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient()


@lru_cache
def get_evidence_fetcher() -> EvidenceFetcher:
    return EvidenceFetcher()


def get_generator(llm: Annotated[LLMClient, Depends(get_llm_client)]) -> MindMapGenerator:
    return MindMapGenerator(llm=llm)


def get_fact_checker(
    llm: Annotated[LLMClient, Depends(get_llm_client)],
    evidence: Annotated[EvidenceFetcher, Depends(get_evidence_fetcher)],
) -> FactChecker:
    return FactChecker(llm=llm, evidence=evidence)


@lru_cache
def get_session_store() -> SessionStore:
    fact_checker = FactChecker(llm=get_llm_client(), evidence=get_evidence_fetcher())
    return SessionStore(fact_checker=fact_checker)


def error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def dump(document: MindMapDocument) -> dict:
    return document.model_dump(mode="json", exclude_none=True)


def file_response(document: MindMapDocument, fmt: str) -> Response:
    exporter, media_type, filename = EXPORT_FORMATS[fmt]
    try:
        content = exporter(document)
    except ExportError:
        logger.exception("Export error")
        return error("Failed to export mind map", 500)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


async def read_content(request: Request) -> Optional[str]:
    """
    Reads the "content" field of a JSON body. Non-string values are
    converted to text. Raises ValueError when the body is not JSON.
    """
    payload = await request.json()
    content = payload.get("content") if isinstance(payload, dict) else None
    if not content:
        return None
    return content if isinstance(content, str) else str(content)


# --- Mind map routes ---

@app.post("/process-pdf")
def process_pdf(
    generator: Annotated[MindMapGenerator, Depends(get_generator)],
    pdf: Optional[UploadFile] = File(None),
):
    if pdf is None:
        return error("No file provided", 400)

    try:
        text = extract_text(pdf.file.read())
    except DocumentError as e:
        return error(str(e), 400)

    try:
        document = generator.generate(text)
    except Exception:
        logger.exception("Error processing PDF %s", pdf.filename)
        return error("Failed to process PDF", 500)

    return dump(document)


@app.post("/verify-content")
async def verify_content(
    request: Request,
    fact_checker: Annotated[FactChecker, Depends(get_fact_checker)],
):
    try:
        content = await read_content(request)
    except ValueError:
        logger.exception("Unreadable verification request body")
        return Verification.degraded().model_dump(mode="json")

    if not content:
        return error("No content provided", 400)

    verification, evidence = await run_in_threadpool(fact_checker.verify_or_degrade, content)
    return JSONResponse(
        verification.model_dump(mode="json"),
        headers={"X-Evidence-Status": evidence.status},
    )


@app.post("/regenerate-node")
async def regenerate_node(
    request: Request,
    fact_checker: Annotated[FactChecker, Depends(get_fact_checker)],
):
    try:
        content = await read_content(request)
    except ValueError:
        logger.exception("Unreadable regeneration request body")
        return error("Failed to regenerate content", 500)

    if not content:
        return error("No content provided", 400)

    try:
        result, evidence = await run_in_threadpool(fact_checker.regenerate_with_evidence, content)
    except Exception:
        logger.exception("Error regenerating content %r", content)
        return error("Failed to regenerate content", 500)

    return JSONResponse(
        result.model_dump(mode="json"),
        headers={"X-Evidence-Status": evidence.status},
    )


# --- Export routes ---

@app.post("/export/pdf")
def export_pdf_route(document: MindMapDocument):
    return file_response(document, "pdf")


@app.post("/export/jpeg")
def export_jpeg_route(document: MindMapDocument):
    return file_response(document, "jpeg")


# --- Editor session routes ---

SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]


@app.exception_handler(SessionNotFoundError)
@app.exception_handler(NodeNotFoundError)
async def not_found_handler(request, exc: MedMapError):
    return error(str(exc), 404)


@app.exception_handler(NodeBusyError)
@app.exception_handler(NodeChangedError)
async def conflict_handler(request, exc: MedMapError):
    return error(str(exc), 409)


@app.post("/sessions")
def create_session(document: MindMapDocument, store: SessionStoreDep):
    session_id, editor = store.create(document)
    logger.info("Created session %s with %d nodes", session_id, len(editor.nodes))
    return {"session_id": session_id, **dump(editor.snapshot())}


@app.get("/sessions/{session_id}")
def get_session(session_id: str, store: SessionStoreDep):
    return dump(store.get(session_id).snapshot())


@app.delete("/sessions/{session_id}")
def delete_session(session_id: str, store: SessionStoreDep):
    store.delete(session_id)
    return {"status": "deleted"}


@app.patch("/sessions/{session_id}/nodes/{node_id}")
def edit_node(session_id: str, node_id: str, update: LabelUpdate, store: SessionStoreDep):
    editor = store.get(session_id)
    editor.edit_label(node_id, update.label)
    return dump(editor.snapshot())


@app.delete("/sessions/{session_id}/nodes/{node_id}")
def delete_node(session_id: str, node_id: str, store: SessionStoreDep):
    editor = store.get(session_id)
    editor.remove_node(node_id)
    return dump(editor.snapshot())


@app.post("/sessions/{session_id}/edges")
def connect_nodes(session_id: str, edge: EdgeCreate, store: SessionStoreDep):
    editor = store.get(session_id)
    try:
        editor.connect(edge.source, edge.target)
    except NodeNotFoundError as e:
        return error(str(e), 400)
    return dump(editor.snapshot())


@app.post("/sessions/{session_id}/nodes/{node_id}/verify")
def verify_session_node(session_id: str, node_id: str, store: SessionStoreDep):
    verification = store.get(session_id).verify_node(node_id)
    return verification.model_dump(mode="json")


@app.post("/sessions/{session_id}/nodes/{node_id}/regenerate")
def regenerate_session_node(session_id: str, node_id: str, store: SessionStoreDep):
    editor = store.get(session_id)
    try:
        result = editor.regenerate_node(node_id)
    except (NodeBusyError, NodeChangedError, NodeNotFoundError):
        raise
    except Exception:
        logger.exception("Error regenerating node %s in session %s", node_id, session_id)
        return error("Failed to regenerate content", 500)
    return result.model_dump(mode="json")


@app.get("/sessions/{session_id}/export")
def export_session(session_id: str, store: SessionStoreDep, format: str = "pdf"):
    editor = store.get(session_id)
    fmt = format.lower()
    if fmt == "jpg":
        fmt = "jpeg"
    if fmt not in EXPORT_FORMATS:
        return error(f"Unsupported export format: {format}", 400)
    return file_response(editor.snapshot(), fmt)


@app.get("/health")
async def health():
    return {"status": "ok"}
