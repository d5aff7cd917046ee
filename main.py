# --- File: main.py ---
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from api import endpoints
from api.models import AssetStatusResponse
from core.guid import GuidGenerator
from core.downloader import VoiceDownloader
from security.signature import SignatureVerifier
from contextlib import asynccontextmanager
import uvicorn
import logging
import os
import config # Your config file


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    logging.info("Application startup sequence initiated...")

    if endpoints._guid_generator_instance is None:
        logging.info("Lifespan: Initializing GuidGenerator...")
        endpoints._guid_generator_instance = GuidGenerator()

    if endpoints._signature_verifier_instance is None:
        logging.info("Lifespan: Initializing SignatureVerifier...")
        endpoints._signature_verifier_instance = SignatureVerifier(token=config.WX_TOKEN)

    if endpoints._voice_downloader_instance is None:
        logging.info("Lifespan: Initializing VoiceDownloader...")
        endpoints._voice_downloader_instance = VoiceDownloader(
            store_dir=config.VOICE_STORE_DIR,
            base_url=config.VOICE_BASE_URL,
            max_workers=config.DOWNLOAD_WORKERS,
            guid_generator=endpoints._guid_generator_instance
        )
    logging.info("All core components pre-initialized via lifespan.")

    yield

    # --- Shutdown ---
    logging.info("Application shutdown sequence initiated...")
    if endpoints._voice_downloader_instance:
        endpoints._voice_downloader_instance.shutdown(wait=True)
        endpoints._voice_downloader_instance = None
        logging.info("Voice download pool drained.")
    logging.info("Application shutdown complete.")

app = FastAPI(
    title="WeChat Voice Relay",
    description="Callback endpoint that verifies platform handshakes and relays voice clips embedded in shared articles.",
    version="0.1.0",
    lifespan=lifespan
)

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logging.error(f"HTTP Exception: Status Code={exc.status_code}, Detail={exc.detail}, Path: {request.url.path}")
    # The platform expects plain text, not JSON
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logging.exception(f"Unhandled Exception at Path {request.url.path}: {exc}")
    return PlainTextResponse("Internal server error", status_code=500)

app.get(
    "/wx", summary="Platform handshake verification", tags=["Callback"],
    response_class=PlainTextResponse
)(endpoints.verify_handshake)

app.post(
    "/wx", summary="Receive a platform message and reply with voice URLs", tags=["Callback"]
)(endpoints.receive_message)

app.get(
    "/assets/{filename}/status", response_model=AssetStatusResponse,
    summary="Check whether a voice URL is backed by a stored file", tags=["Assets"]
)(endpoints.get_asset_status)

if config.SERVE_VOICE_FILES:
    os.makedirs(config.VOICE_STORE_DIR, exist_ok=True)
    app.mount("/voice", StaticFiles(directory=config.VOICE_STORE_DIR, check_dir=False), name="voice")

@app.get("/", summary="Root endpoint", tags=["General"], include_in_schema=False)
async def read_root():
    return {"message": "WeChat Voice Relay is running. Platform callbacks go to /wx."}

if __name__ == "__main__":
    logging.info("Starting WeChat Voice Relay server using Uvicorn...")
    if not config.WX_TOKEN:
        logging.critical("WX_TOKEN environment variable is not set. Handshakes will be rejected.")

    log_level = os.getenv("LOG_LEVEL", "info").lower()
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    reload_enabled = os.getenv("RELOAD", "false").lower() == "true"

    logging.info(f"Server starting on {host}:{port} with log level {log_level} and reload {'enabled' if reload_enabled else 'disabled'}")

    # uvicorn exits with a non-zero status if it cannot bind
    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        log_level=log_level,
        reload=reload_enabled
    )
