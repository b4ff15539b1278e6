"""
VibeFinder Recognition Client
ACRCloud Identification Protocol V1 서명 요청 + 응답 파싱
"""

import base64
import hashlib
import hmac
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from .errors import ConfigurationError
from .models import Matched, NoMatch, RecognitionFailed, RecognitionMatch, RecognitionOutcome

logger = logging.getLogger(__name__)

HTTP_METHOD = "POST"
IDENTIFY_PATH = "/v1/identify"
DATA_TYPE = "audio"
SIGNATURE_VERSION = "1"


def build_string_to_sign(access_key: str, timestamp: str) -> str:
    """서명 대상 문자열 (개행으로 join)"""
    return "\n".join([
        HTTP_METHOD,
        IDENTIFY_PATH,
        access_key,
        DATA_TYPE,
        SIGNATURE_VERSION,
        timestamp,
    ])


def sign(string_to_sign: str, access_secret: str) -> str:
    """HMAC-SHA1 서명 (base64)"""
    digest = hmac.new(
        access_secret.encode("utf-8"),
        string_to_sign.encode("utf-8"),
        hashlib.sha1
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def _first_entry(entries: Any) -> Optional[Dict[str, Any]]:
    if isinstance(entries, list) and entries and isinstance(entries[0], dict):
        return entries[0]
    return None


def _to_match(entry: Dict[str, Any], source: str) -> RecognitionMatch:
    artists: List[Dict[str, str]] = []
    for artist in entry.get("artists") or []:
        if isinstance(artist, dict) and artist.get("name"):
            artists.append({"name": str(artist["name"])})

    album = entry.get("album")
    album_name = album.get("name", "") if isinstance(album, dict) else ""

    external_ids = entry.get("external_ids")
    isrc = external_ids.get("isrc") if isinstance(external_ids, dict) else None

    return RecognitionMatch(
        title=str(entry.get("title") or ""),
        artists=artists,
        album_name=str(album_name or ""),
        source=source,
        isrc=str(isrc) if isrc else None
    )


def parse_identify_response(payload: Any) -> RecognitionOutcome:
    """
    ACRCloud 응답 파싱

    - status.code == 0 이고 music 이 있으면 music 우선
    - music 이 비어 있으면 humming 확인
    - 그 외에는 NoMatch
    """
    if not isinstance(payload, dict):
        return RecognitionFailed(reason="Unexpected response shape")

    status = payload.get("status")
    code = status.get("code") if isinstance(status, dict) else None
    if code != 0:
        return NoMatch(status_code=code if isinstance(code, int) else None)

    metadata = payload.get("metadata")
    if not isinstance(metadata, dict):
        return NoMatch(status_code=code)

    music = _first_entry(metadata.get("music"))
    if music is not None:
        return Matched(_to_match(music, "music"))

    humming = _first_entry(metadata.get("humming"))
    if humming is not None:
        return Matched(_to_match(humming, "humming"))

    return NoMatch(status_code=code)


class SignedRecognitionClient:
    """ACRCloud 인식 클라이언트"""

    def __init__(
        self,
        client: httpx.AsyncClient,
        host: str,
        access_key: str,
        access_secret: str,
        clock: Callable[[], float] = time.time
    ):
        self.client = client
        self.host = host
        self.access_key = access_key
        self.access_secret = access_secret
        self.clock = clock

    def _check_config(self) -> None:
        missing = [
            name for name, value in (
                ("ACRCLOUD_HOST", self.host),
                ("ACRCLOUD_ACCESS_KEY", self.access_key),
                ("ACRCLOUD_ACCESS_SECRET", self.access_secret),
            ) if not value
        ]
        if missing:
            raise ConfigurationError(f"ACRCloud credentials are not configured: {', '.join(missing)}")

    def build_form(self, sample: bytes, timestamp: str) -> Dict[str, str]:
        """multipart 텍스트 필드 (sample 제외)"""
        signature = sign(build_string_to_sign(self.access_key, timestamp), self.access_secret)
        return {
            "sample_bytes": str(len(sample)),
            "access_key": self.access_key,
            "data_type": DATA_TYPE,
            "signature_version": SIGNATURE_VERSION,
            "signature": signature,
            "timestamp": timestamp,
        }

    async def identify(self, sample: bytes, filename: str) -> RecognitionOutcome:
        """
        오디오 샘플 인식 (단일 시도, 재시도 없음)

        Raises:
            ConfigurationError: 호스트/키/시크릿 누락
        """
        self._check_config()

        timestamp = str(int(self.clock()))
        form = self.build_form(sample, timestamp)
        url = f"https://{self.host}{IDENTIFY_PATH}"

        try:
            response = await self.client.post(
                url,
                data=form,
                files={"sample": (filename or "sample", sample, "application/octet-stream")}
            )
        except httpx.HTTPError as e:
            logger.error(f"ACRCloud request failed: {e}")
            return RecognitionFailed(reason="Fingerprint service unreachable")

        logger.info(f"ACRCloud response status: {response.status_code}")
        if response.is_error:
            return RecognitionFailed(reason=f"Fingerprint service error {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"ACRCloud response parse failed: {e}")
            return RecognitionFailed(reason="Fingerprint service returned invalid JSON")

        outcome = parse_identify_response(payload)
        if isinstance(outcome, NoMatch):
            logger.info(f"ACRCloud no match (code={outcome.status_code})")
        return outcome
