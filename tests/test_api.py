"""
tests/test_api.py
==================
HTTP API Tests — SignRelay

Tests verify:
    1. POST /transcribe and POST /process-video success envelopes
    2. Missing upload field → {"error": "No ... file provided"}
    3. Unconnected Space → "not initialized" without any remote call
    4. Remote failure message is surfaced verbatim
    5. One unreachable Space does not affect the other endpoint
    6. Uniform 500 vs. distinct 400/503/502 status policy
    7. GET /health reports per-Space connection status
    8. The route's field name picks the form part; text values count as missing

All tests are OFFLINE. The registry connect factory returns MagicMocks.
"""

import dataclasses
import os
import sys
import unittest
from unittest.mock import MagicMock, patch

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fastapi.testclient import TestClient

from src.api.app import ERROR_KIND_HEADER, create_app
from src.relay.relay import TRANSCRIBE


# ===================================================================
# Test fixtures
# ===================================================================

S2S_URL = "http://speech2sign.test"
SIGN_URL = "http://sign2speech.test"

_ENV = {"SPEECH2SIGN_URL": S2S_URL, "SIGN2SPEECH_URL": SIGN_URL}


def _prediction(text="hello"):
    return (text, {"url": "a.wav"}, {"video": {"url": "b.mp4"}, "subtitles": None})


def _audio_file():
    return {"audio": ("clip.wav", b"RIFF0000WAVEfmt ", "audio/wav")}


def _video_file():
    return {"video": ("clip.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")}


class _RelayApiCase(unittest.TestCase):
    """Builds an app whose remote Spaces are MagicMocks."""

    unreachable: tuple = ()
    distinct_error_status = False

    def setUp(self):
        self.clients = {S2S_URL: MagicMock(name="speech2sign"), SIGN_URL: MagicMock(name="sign2speech")}
        for client in self.clients.values():
            client.predict.return_value = _prediction()

        def connect(url):
            if url in self.unreachable:
                raise ConnectionError(f"could not reach {url}")
            return self.clients[url]

        env = patch.dict(os.environ, _ENV)
        env.start()
        self.addCleanup(env.stop)

        self.app = create_app(connect=connect, distinct_error_status=self.distinct_error_status)
        self.http = TestClient(self.app)
        self.http.__enter__()
        self.addCleanup(self.http.__exit__, None, None, None)

    @property
    def s2s(self):
        return self.clients[S2S_URL]

    @property
    def sign(self):
        return self.clients[SIGN_URL]


# ===================================================================
# Both Spaces connected
# ===================================================================


class TestTranscribeEndpoint(_RelayApiCase):

    def test_success(self):
        resp = self.http.post("/transcribe", files=_audio_file())

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(),
            {"result": {"text": "hello", "audio": "a.wav", "video": "b.mp4"}},
        )
        self.s2s.predict.assert_called_once()
        self.sign.predict.assert_not_called()

    def test_missing_audio_field(self):
        resp = self.http.post("/transcribe", files=_video_file())

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "No audio file provided"})
        self.assertEqual(resp.headers[ERROR_KIND_HEADER], "client_data")
        self.s2s.predict.assert_not_called()

    def test_empty_request_body(self):
        resp = self.http.post("/transcribe")
        self.assertEqual(resp.json(), {"error": "No audio file provided"})

    def test_upstream_failure(self):
        self.s2s.predict.side_effect = RuntimeError("Space is sleeping")

        resp = self.http.post("/transcribe", files=_audio_file())

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Space is sleeping"})
        self.assertEqual(resp.headers[ERROR_KIND_HEADER], "upstream_failure")


class TestProcessVideoEndpoint(_RelayApiCase):

    def test_success(self):
        self.sign.predict.return_value = _prediction("good morning")

        resp = self.http.post("/process-video", files=_video_file())

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(),
            {"result": {"text": "good morning", "audio": "a.wav", "video": "b.mp4"}},
        )
        _, kwargs = self.sign.predict.call_args
        self.assertIn("input_video_path", kwargs)
        self.assertEqual(kwargs["api_name"], "/predict")

    def test_missing_video_field(self):
        resp = self.http.post("/process-video", files=_audio_file())

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "No video file provided"})

    def test_upstream_timeout(self):
        self.sign.predict.side_effect = TimeoutError("upstream timeout")

        resp = self.http.post("/process-video", files=_video_file())

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "upstream timeout"})


class TestHealthEndpoint(_RelayApiCase):

    def test_all_connected(self):
        resp = self.http.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(),
            {"status": "ok", "services": {"speech2sign": True, "sign2speech": True}},
        )


# ===================================================================
# speech2sign unreachable at startup
# ===================================================================


class TestPartialStartup(_RelayApiCase):

    unreachable = (S2S_URL,)

    def test_transcribe_reports_not_initialized(self):
        resp = self.http.post("/transcribe", files=_audio_file())

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Gradio client for speech2sign not initialized"})
        self.assertEqual(resp.headers[ERROR_KIND_HEADER], "service_unavailable")
        self.s2s.predict.assert_not_called()

    def test_not_initialized_checked_before_file(self):
        resp = self.http.post("/transcribe")
        self.assertEqual(resp.json(), {"error": "Gradio client for speech2sign not initialized"})

    def test_other_endpoint_still_serves(self):
        resp = self.http.post("/process-video", files=_video_file())

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["result"]["video"], "b.mp4")

    def test_health_reports_missing_space(self):
        resp = self.http.get("/health")
        self.assertEqual(resp.json()["services"], {"speech2sign": False, "sign2speech": True})


# ===================================================================
# Distinct status codes
# ===================================================================


class TestDistinctStatus(_RelayApiCase):

    unreachable = (SIGN_URL,)
    distinct_error_status = True

    def test_missing_file_is_400(self):
        resp = self.http.post("/transcribe")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "No audio file provided"})

    def test_not_initialized_is_503(self):
        resp = self.http.post("/process-video", files=_video_file())
        self.assertEqual(resp.status_code, 503)

    def test_upstream_failure_is_502(self):
        self.s2s.predict.side_effect = ConnectionError("connection reset")
        resp = self.http.post("/transcribe", files=_audio_file())
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json(), {"error": "connection reset"})


# ===================================================================
# Form field handling
# ===================================================================


class TestUploadField(_RelayApiCase):

    def test_text_value_counts_as_missing_audio(self):
        resp = self.http.post("/transcribe", data={"audio": "notafile"})

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "No audio file provided"})
        self.assertEqual(resp.headers[ERROR_KIND_HEADER], "client_data")
        self.s2s.predict.assert_not_called()

    def test_text_value_counts_as_missing_video(self):
        resp = self.http.post("/process-video", data={"video": "notafile"})

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "No video file provided"})

    def test_file_part_without_filename_counts_as_missing(self):
        resp = self.http.post("/transcribe", files={"audio": ("", b"RIFF", "audio/wav")})
        self.assertEqual(resp.json(), {"error": "No audio file provided"})

    def test_route_field_name_selects_the_form_part(self):
        renamed = dataclasses.replace(TRANSCRIBE, field_name="clip")

        with patch("src.api.app.TRANSCRIBE", renamed):
            by_new_name = self.http.post("/transcribe", files={"clip": ("clip.wav", b"RIFF", "audio/wav")})
            by_old_name = self.http.post("/transcribe", files=_audio_file())

        self.assertEqual(by_new_name.status_code, 200)
        self.assertEqual(by_new_name.json()["result"]["text"], "hello")
        self.assertEqual(by_old_name.json(), {"error": "No audio file provided"})
        self.s2s.predict.assert_called_once()


if __name__ == "__main__":
    unittest.main()
