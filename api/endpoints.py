# --- File: api/endpoints.py ---
from fastapi import HTTPException, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from typing import Optional
from api.models import HandshakeParams, AssetStatusResponse
from ingestion.parser import WxMessageParser
from core.guid import GuidGenerator
from core.fetcher import fetch_content
from core.extractor import extract_voice_ids
from core.downloader import VoiceDownloader, AssetState
from core.errors import ContentFetchError
from core.reply import compose_url_reply
from security.signature import SignatureVerifier
from utils import check_params, HANDSHAKE_PARAMS
import logging

logger = logging.getLogger(__name__)

XML_MEDIA_TYPE = "application/xml"

# --- Dependency Injection Setup ---
# Global instances, primarily set by lifespan in main.py
_guid_generator_instance: Optional[GuidGenerator] = None
_signature_verifier_instance: Optional[SignatureVerifier] = None
_voice_downloader_instance: Optional[VoiceDownloader] = None


def get_guid_generator() -> GuidGenerator:
    global _guid_generator_instance
    if _guid_generator_instance is None:
        logger.warning("GuidGenerator instance was None, initializing now (should have been done by lifespan).")
        _guid_generator_instance = GuidGenerator()
    return _guid_generator_instance

def get_signature_verifier() -> SignatureVerifier:
    global _signature_verifier_instance
    if _signature_verifier_instance is None:
        logger.warning("SignatureVerifier instance was None, initializing now (should have been done by lifespan).")
        _signature_verifier_instance = SignatureVerifier()
    return _signature_verifier_instance

def get_voice_downloader(
    guid_generator: GuidGenerator = Depends(get_guid_generator)
) -> VoiceDownloader:
    global _voice_downloader_instance
    if _voice_downloader_instance is None:
        logger.warning("VoiceDownloader instance was None, initializing now (should have been done by lifespan).")
        _voice_downloader_instance = VoiceDownloader(guid_generator=guid_generator)
    return _voice_downloader_instance

# --- API Endpoints ---

async def verify_handshake(
    request: Request,
    verifier: SignatureVerifier = Depends(get_signature_verifier)
):
    query = request.query_params
    logger.debug(f"Handshake query: {dict(query)}")

    missing = check_params(query, HANDSHAKE_PARAMS)
    if missing:
        logger.error(f"Handshake rejected, key '{missing}' does not exist. Query: {dict(query)}")
        raise HTTPException(status_code=400, detail=f"Error: key '{missing}' does not exist")

    # Repeated keys are concatenated
    params = HandshakeParams(**{key: "".join(query.getlist(key)) for key in HANDSHAKE_PARAMS})

    if verifier.verify(params.signature, params.timestamp, params.nonce):
        logger.info("Handshake verified, echoing challenge.")
        return PlainTextResponse(params.echostr)

    logger.warning(f"Handshake signature mismatch (timestamp={params.timestamp}, nonce={params.nonce}).")
    return PlainTextResponse("")

async def receive_message(
    request: Request,
    parser: WxMessageParser = Depends(WxMessageParser),
    downloader: VoiceDownloader = Depends(get_voice_downloader)
):
    body = await request.body()
    result = parser.parse(body)
    if not result.ok:
        logger.warning(f"Could not parse callback body ({result.error}); treating content as empty.")

    message = result.message
    if message is None or not message.source_url:
        logger.debug(f"Wrong query: {dict(request.query_params)}")
        raise HTTPException(status_code=400, detail="Wrong query")

    url = message.source_url
    logger.info(f"Voice source url from {message.from_user}: {url}")
    try:
        page = await run_in_threadpool(fetch_content, url)
    except ContentFetchError as e:
        logger.error(f"Aborting message from {message.from_user}: {e}")
        raise HTTPException(status_code=502, detail=f"Could not fetch {url}")

    voice_ids = extract_voice_ids(page)
    assets = downloader.download_all(voice_ids)
    if not assets:
        logger.info(f"No voice clips found at {url}")

    reply = compose_url_reply(message.from_user, message.to_user, [asset.public_url for asset in assets])
    if not reply.ok:
        logger.error(f"Reply to {message.from_user} could not be serialized ({reply.error}); sending empty body.")
        return Response(content="", media_type=XML_MEDIA_TYPE)
    return Response(content=reply.xml, media_type=XML_MEDIA_TYPE)

async def get_asset_status(
    filename: str,
    downloader: VoiceDownloader = Depends(get_voice_downloader)
):
    state = downloader.status(filename)
    if state == AssetState.UNKNOWN:
        logger.warning(f"Status request for unknown asset: {filename}")
        raise HTTPException(status_code=404, detail=f"Asset '{filename}' not found.")
    return AssetStatusResponse(filename=filename, state=state.value)
