"""
Tests for the /wx callback and asset status endpoints.

Test coverage:
- Handshake: missing parameters, mismatched and matched signatures
- Message flow: empty/malformed content, source fetch failure, full pipeline
- Asset status lookups
"""

import hashlib
from unittest.mock import patch
from xml.etree import ElementTree

import pytest
from fastapi.testclient import TestClient

import main
from api import endpoints
from core.downloader import VoiceDownloader
from core.errors import ContentFetchError
from core.guid import GuidGenerator
from security.signature import SignatureVerifier

ARTICLE = b'<div><mpvoice voice_encode_fileid="AA"></mpvoice><mpvoice voice_encode_fileid="BB"></mpvoice></div>'

MESSAGE_TEMPLATE = """<xml>
<ToUserName><![CDATA[gh_service]]></ToUserName>
<FromUserName><![CDATA[o_user]]></FromUserName>
<CreateTime>1490000000</CreateTime>
<MsgType><![CDATA[text]]></MsgType>
<Content><![CDATA[{content}]]></Content>
</xml>"""


def handshake_query(token="abc", timestamp="123", nonce="xyz", echostr="ping"):
    signature = hashlib.sha1("".join(sorted([token, timestamp, nonce])).encode()).hexdigest()
    return {"signature": signature, "timestamp": timestamp, "nonce": nonce, "echostr": echostr}


@pytest.fixture
def downloader(tmp_path):
    store = tmp_path / "voice_store"
    instance = VoiceDownloader(
        store_dir=str(store),
        base_url="http://relay.test/voice/",
        source_url="http://media.test/getvoice?mediaid=",
        max_workers=2,
        guid_generator=GuidGenerator()
    )
    yield instance
    instance.shutdown(wait=True)


@pytest.fixture
def client(downloader):
    main.app.dependency_overrides[endpoints.get_signature_verifier] = lambda: SignatureVerifier(token="abc")
    main.app.dependency_overrides[endpoints.get_voice_downloader] = lambda: downloader
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


class TestHandshake:

    def test_matched_signature_echoes_challenge(self, client):
        response = client.get("/wx", params=handshake_query())
        assert response.status_code == 200
        assert response.text == "ping"

    def test_mismatched_signature_returns_empty_body(self, client):
        query = handshake_query()
        query["signature"] = "0" * 40
        response = client.get("/wx", params=query)
        assert response.status_code == 200
        assert response.text == ""

    def test_signature_from_other_token_is_rejected(self, client):
        response = client.get("/wx", params=handshake_query(token="other"))
        assert response.status_code == 200
        assert response.text == ""

    @pytest.mark.parametrize("missing", ["signature", "timestamp", "nonce", "echostr"])
    def test_missing_parameter_is_client_error(self, client, missing):
        query = handshake_query()
        del query[missing]
        with patch.object(SignatureVerifier, "verify") as mock_verify:
            response = client.get("/wx", params=query)

        assert response.status_code == 400
        assert missing in response.text
        mock_verify.assert_not_called()

    def test_empty_values_are_present(self, client):
        response = client.get("/wx", params={"signature": "", "timestamp": "", "nonce": "", "echostr": "x"})
        assert response.status_code == 200
        assert response.text == ""


class TestMessageFlow:

    def test_empty_content_is_wrong_query(self, client, downloader):
        with patch("api.endpoints.fetch_content") as mock_fetch, \
                patch.object(downloader, "download_all") as mock_download:
            response = client.post("/wx", content=MESSAGE_TEMPLATE.format(content=""))

        assert response.status_code == 400
        assert response.text == "Wrong query"
        mock_fetch.assert_not_called()
        mock_download.assert_not_called()

    @pytest.mark.parametrize("body", ["", "garbage", "<xml><CreateTime>soon</CreateTime><Content>http://x</Content></xml>"])
    def test_unparseable_body_is_wrong_query(self, client, body):
        with patch("api.endpoints.fetch_content") as mock_fetch:
            response = client.post("/wx", content=body)

        assert response.status_code == 400
        assert response.text == "Wrong query"
        mock_fetch.assert_not_called()

    def test_source_fetch_failure_aborts(self, client, downloader):
        error = ContentFetchError("http://mp.test/s", "connection refused")
        with patch("api.endpoints.fetch_content", side_effect=error), \
                patch.object(downloader, "download_all") as mock_download:
            response = client.post("/wx", content=MESSAGE_TEMPLATE.format(content="http://mp.test/s"))

        assert response.status_code == 502
        assert "http://mp.test/s" in response.text
        mock_download.assert_not_called()

    def test_replies_with_voice_urls(self, client, downloader, tmp_path):
        with patch("api.endpoints.fetch_content", return_value=ARTICLE) as mock_page, \
                patch("core.downloader.fetch_content", return_value=b"ID3") as mock_voice:
            response = client.post("/wx", content=MESSAGE_TEMPLATE.format(content="http://mp.test/s"))
            downloader.shutdown(wait=True)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        mock_page.assert_called_once_with("http://mp.test/s")
        assert mock_voice.call_count == 2

        root = ElementTree.fromstring(response.text)
        assert root.findtext("ToUserName") == "o_user"
        assert root.findtext("FromUserName") == "gh_service"
        assert root.findtext("MsgType") == "text"

        urls = root.findtext("Content").split("\n")
        assert len(urls) == 2
        assert len(set(urls)) == 2
        filenames = [url.rsplit("/", 1)[1] for url in urls]
        assert all(url.startswith("http://relay.test/voice/") for url in urls)
        assert filenames[0].endswith("0.mp3") and filenames[1].endswith("1.mp3")
        stored = sorted(p.name for p in (tmp_path / "voice_store").iterdir())
        assert stored == sorted(filenames)

    def test_unlisted_message_kind_still_runs_pipeline(self, client):
        body = MESSAGE_TEMPLATE.format(content="http://mp.test/s").replace("[text]", "[sticker]")
        with patch("api.endpoints.fetch_content", return_value=b"<html></html>") as mock_page:
            response = client.post("/wx", content=body)

        assert response.status_code == 200
        mock_page.assert_called_once_with("http://mp.test/s")

    def test_page_without_voices_replies_empty_content(self, client):
        with patch("api.endpoints.fetch_content", return_value=b"<html></html>"):
            response = client.post("/wx", content=MESSAGE_TEMPLATE.format(content="http://mp.test/s"))

        assert response.status_code == 200
        assert ElementTree.fromstring(response.text).findtext("Content") in ("", None)

    def test_serialization_failure_returns_empty_body(self, client):
        with patch("api.endpoints.fetch_content", return_value=b""), \
                patch("core.reply.serialize_text_reply", side_effect=ValueError("boom")):
            response = client.post("/wx", content=MESSAGE_TEMPLATE.format(content="http://mp.test/s"))

        assert response.status_code == 200
        assert response.text == ""


class TestAssetStatus:

    def test_reports_state(self, client, downloader):
        with patch("core.downloader.fetch_content", return_value=b"ID3"):
            assets = downloader.download_all(["AA"])
            assets[0].future.result(timeout=5)

        response = client.get(f"/assets/{assets[0].filename}/status")
        assert response.status_code == 200
        assert response.json() == {"filename": assets[0].filename, "state": "materialized"}

    def test_unknown_asset_is_404(self, client):
        response = client.get("/assets/missing.mp3/status")
        assert response.status_code == 404


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "/wx" in response.json()["message"]
