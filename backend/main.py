"""FastAPI application for the Aquamark watermark service."""

import base64
import logging
import secrets

from fastapi import FastAPI, File, Form, Header, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import (
    API_TOKEN,
    DISCLAIMERS_PATH,
    HOST,
    LOG_LEVEL,
    MAX_FILE_SIZE_BYTES,
    PDF_IGNORE_ENCRYPTION,
    PORT,
)
from disclaimers import DisclaimerResolver
from errors import (
    DocumentLoadError,
    ImageFormatError,
    LogoFetchError,
    LogoNotFoundError,
    MissingInputError,
    WatermarkError,
)
from logo_store import fetch_logo
from pdf_watermarker import WatermarkResult, watermark_document
from watermark import WatermarkImage

logger = logging.getLogger(__name__)
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

resolver = DisclaimerResolver.from_json(DISCLAIMERS_PATH) if DISCLAIMERS_PATH else DisclaimerResolver()

app = FastAPI(
    title="Aquamark Watermark API",
    description="Tiles a submitter's logo across every page of a PDF",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-State-Disclaimer", "Content-Disposition"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Error bodies are {"error": message}."""
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = ", ".join(str(err["loc"][-1]) for err in exc.errors())
    return JSONResponse({"error": f"Invalid request fields: {fields}"}, status_code=400)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _check_token(authorization: str | None) -> None:
    """Require ``Authorization: Bearer <API_TOKEN>`` when a token is configured."""
    if not API_TOKEN:
        return
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(token.strip(), API_TOKEN):
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def _run_watermark(pdf_bytes: bytes, logo_bytes: bytes) -> WatermarkResult:
    """Decode the logo and watermark the document (CPU-bound, runs in a thread)."""
    image = WatermarkImage.from_bytes(logo_bytes)
    return watermark_document(pdf_bytes, image, ignore_encryption=PDF_IGNORE_ENCRYPTION)


def _error_status(error: WatermarkError) -> int:
    if isinstance(error, MissingInputError):
        return 400
    if isinstance(error, LogoNotFoundError):
        return 404
    if isinstance(error, (DocumentLoadError, ImageFormatError)):
        return 422
    if isinstance(error, LogoFetchError):
        return 502
    return 500


def _header_safe(text: str) -> str:
    """HTTP header values must be latin-1."""
    return text.encode("latin-1", "replace").decode("latin-1")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/api/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "service": "aquamark-watermark"}


@app.post("/watermark")
async def watermark(
    pdf: UploadFile | None = File(None),
    user_email: str | None = Form(None),
    state: str | None = Form(None),
    response_format: str = Form("json"),
    authorization: str | None = Header(None),
) -> Response:
    """Watermark an uploaded PDF with the submitter's registered logo.

    Returns JSON with the base64-encoded PDF, or the raw PDF as an
    attachment when ``response_format`` is ``binary``. The jurisdiction
    advisory, if a state was given, is also sent as ``X-State-Disclaimer``.
    """
    _check_token(authorization)

    response_format = response_format.lower()
    if response_format not in ("json", "binary"):
        raise HTTPException(status_code=400, detail="response_format must be json or binary")

    user_email = (user_email or "").strip()
    content = await pdf.read() if pdf is not None else b""
    if not user_email or not content:
        raise HTTPException(status_code=400, detail="Missing user_email or PDF file")
    if len(content) > MAX_FILE_SIZE_BYTES:
        raise HTTPException(status_code=413, detail=f"File too large. Max {MAX_FILE_SIZE_BYTES // (1024*1024)}MB")

    try:
        logo_bytes = await fetch_logo(user_email)
        result = await run_in_threadpool(_run_watermark, content, logo_bytes)
    except WatermarkError as e:
        status = _error_status(e)
        if status >= 500:
            logger.error("Watermarking failed for %s: %s", user_email, e)
        else:
            logger.warning("Rejected request from %s: %s", user_email, e)
        raise HTTPException(status_code=status, detail=str(e))
    except Exception:
        logger.exception("Unexpected error while watermarking for %s", user_email)
        raise HTTPException(status_code=500, detail="Failed to watermark document")

    disclaimer = resolver.advisory_for(state)
    headers = {"X-State-Disclaimer": _header_safe(disclaimer)} if disclaimer else {}

    logger.info(
        "Watermarked %s for %s: %d pages, %d tiles",
        pdf.filename, user_email, result.page_count, result.tile_count,
    )

    if response_format == "binary":
        stem = (pdf.filename or "document.pdf").rsplit(".", 1)[0].replace('"', "")
        headers["Content-Disposition"] = f'attachment; filename="watermarked-{_header_safe(stem)}.pdf"'
        return Response(content=result.pdf_bytes, media_type="application/pdf", headers=headers)

    return JSONResponse(
        {
            "success": True,
            "disclaimer": disclaimer,
            "pages": result.page_count,
            "tiles": result.tile_count,
            "file": base64.b64encode(result.pdf_bytes).decode(),
        },
        headers=headers,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=HOST, port=PORT, reload=True)
