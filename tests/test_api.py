"""
End-to-end API tests with faked upstream services.
"""
import asyncio
from io import BytesIO

import httpx
import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile

from conftest import ACR_HOST, DEEZER, LASTFM, SPOTIFY_ACCOUNTS, SPOTIFY_API, make_settings
from vibefinder.api.deps import get_config, get_http_client
from vibefinder.api.routes_recognize import recognize
from vibefinder.core.config import Settings
from vibefinder.core.similarity import ENRICH_TOPN
from vibefinder.main import app


def _client(upstream, settings):
    async def fake_http_client():
        async with upstream.client() as client:
            yield client

    app.dependency_overrides[get_config] = lambda: settings
    app.dependency_overrides[get_http_client] = fake_http_client
    return TestClient(app)


@pytest.fixture(autouse=True)
def _reset_overrides():
    yield
    app.dependency_overrides.clear()


def _post_sample(client, data=b"RIFF....WAVEfmt "):
    return client.post("/api/recognize", files={"sample": ("clip.wav", data, "audio/wav")})


class TestRecognizeEndpoint:

    def test_missing_sample(self, upstream, settings):
        resp = _client(upstream, settings).post("/api/recognize")
        assert resp.status_code == 400
        assert resp.json() == {"error": "No audio file found."}

    def test_empty_sample(self, upstream, settings):
        resp = _post_sample(_client(upstream, settings), data=b"")
        assert resp.status_code == 400

    def test_oversized_sample(self, upstream):
        client = _client(upstream, make_settings(MAX_SAMPLE_BYTES=4))
        assert _post_sample(client, data=b"12345").status_code == 400
        assert upstream.requests == []

    def test_text_field_instead_of_file(self, upstream, settings):
        resp = _client(upstream, settings).post("/api/recognize", data={"sample": "not-a-file"})
        assert resp.status_code == 400
        assert "error" in resp.json()
        assert "detail" not in resp.json()
        assert upstream.requests == []

    def test_declared_size_rejected_before_read(self, settings):
        class ExplodingRead(UploadFile):
            async def read(self, size=-1):
                raise AssertionError("sample should not be read")

        sample = ExplodingRead(BytesIO(b""), size=settings.MAX_SAMPLE_BYTES + 1, filename="big.wav")
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(recognize(sample=sample, config=settings, client=None))
        assert exc_info.value.status_code == 400

    def test_no_match_is_204(self, upstream, settings):
        upstream.add(ACR_HOST, "/v1/identify", json={"status": {"code": 1001, "msg": "No result"}})
        resp = _post_sample(_client(upstream, settings))
        assert resp.status_code == 204
        assert resp.content == b""
        assert upstream.requests_to(SPOTIFY_ACCOUNTS) == []

    def test_match_without_catalog_hit(self, upstream, settings):
        upstream.add(ACR_HOST, "/v1/identify", json={
            "status": {"code": 0},
            "metadata": {"music": [{
                "title": "Song A",
                "artists": [{"name": "Artist X"}],
                "album": {"name": "Album A"},
            }]},
        })
        upstream.add(SPOTIFY_ACCOUNTS, "/api/token", json={"access_token": "tok"})
        upstream.add(SPOTIFY_API, "/v1/search", json={"tracks": {"items": []}})

        resp = _post_sample(_client(upstream, settings))

        assert resp.status_code == 200
        assert resp.json() == {
            "title": "Song A",
            "artists": [{"name": "Artist X"}],
            "album": {"name": "Album A"},
            "source": "music",
            "spotifyId": None,
        }
        queries = [r.url.params["q"] for r in upstream.requests_to(SPOTIFY_API, "/v1/search")]
        assert queries == ['track:"Song A" artist:"Artist X"']

    def test_humming_match_with_catalog_hit(self, upstream, settings):
        upstream.add(ACR_HOST, "/v1/identify", json={
            "status": {"code": 0},
            "metadata": {"humming": [{
                "title": "Hum",
                "artists": [{"name": "Singer"}],
                "album": {"name": "Hums"},
                "external_ids": {"isrc": "GB0000000001"},
            }]},
        })
        upstream.add(SPOTIFY_ACCOUNTS, "/api/token", json={"access_token": "tok"})
        upstream.add(SPOTIFY_API, "/v1/search", json={
            "tracks": {"items": [{"id": "sp42", "artists": [{"id": "a1", "name": "Singer"}]}]}
        })

        resp = _post_sample(_client(upstream, settings))

        assert resp.status_code == 200
        body = resp.json()
        assert body["source"] == "humming"
        assert body["spotifyId"] == "sp42"

    def test_missing_configuration(self, upstream):
        client = _client(upstream, make_settings(ACRCLOUD_ACCESS_SECRET=""))
        resp = _post_sample(client)
        assert resp.status_code == 500
        assert "error" in resp.json()
        assert upstream.requests == []

    def test_fingerprint_failure_is_distinct_from_no_match(self, upstream, settings):
        upstream.add(ACR_HOST, "/v1/identify", status_code=500, json={})
        resp = _post_sample(_client(upstream, settings))
        assert resp.status_code == 502
        assert "error" in resp.json()

    def test_token_failure_after_match(self, upstream, settings):
        upstream.add(ACR_HOST, "/v1/identify", json={
            "status": {"code": 0},
            "metadata": {"music": [{"title": "S", "artists": [{"name": "A"}], "album": {"name": "B"}}]},
        })
        upstream.add(SPOTIFY_ACCOUNTS, "/api/token", status_code=400, json={"error": "invalid_client"})
        resp = _post_sample(_client(upstream, settings))
        assert resp.status_code == 502


def _recommend_upstream(upstream, deezer_handler=None):
    upstream.add(SPOTIFY_ACCOUNTS, "/api/token", json={"access_token": "tok"})
    upstream.add(SPOTIFY_API, "/v1/tracks/sp123", json={
        "id": "sp123",
        "name": "Song A",
        "artists": [{"name": "Artist X"}],
        "album": {"name": "Album A"},
    })

    info = {
        ("Artist X", "Song A"): ("1000", ["indie", "rock"]),
        ("Band B", "Close"): ("999999", ["indie", "rock", "pop"]),
        ("Band C", "Far"): ("0", ["metal"]),
        ("Band D", "Middle"): ("9999", ["Rock"]),
    }

    def lastfm(request):
        params = request.url.params
        if params["method"] == "track.getsimilar":
            return httpx.Response(200, json={"similartracks": {"track": [
                {"name": "Far", "artist": {"name": "Band C"}, "match": "0.2"},
                {"name": "Close", "artist": {"name": "Band B"}, "match": "0.9"},
                {"name": "Middle", "artist": "Band D", "match": 0.5},
            ]}})
        playcount, tags = info[(params["artist"], params["track"])]
        return httpx.Response(200, json={
            "track": {"playcount": playcount, "toptags": {"tag": [{"name": t} for t in tags]}}
        })

    def deezer(request):
        if "Middle" in request.url.params["q"]:
            return httpx.Response(500, json={})
        return httpx.Response(200, json={"data": [{"preview": "https://cdn.test/p.mp3", "album": {"title": "LP"}}]})

    upstream.add(LASTFM, "/2.0/", handler=lastfm)
    upstream.add(DEEZER, "/search", handler=deezer_handler or deezer)


class TestRecommendEndpoint:

    def test_ranked_recommendations(self, upstream, settings):
        _recommend_upstream(upstream)
        resp = _client(upstream, settings).get("/api/song/sp123")

        assert resp.status_code == 200
        body = resp.json()
        assert body["track"]["name"] == "Song A"

        recs = body["recommendations"]
        assert [r["title"] for r in recs] == ["Close", "Middle", "Far"]
        scores = [r["vibeScore"] for r in recs]
        assert scores == sorted(scores, reverse=True)
        assert all(0 <= s <= 100 for s in scores)

        by_title = {r["title"]: r for r in recs}
        assert by_title["Close"]["tagOverlap"] == 2
        assert by_title["Close"]["tagOverlapPct"] == pytest.approx(100.0)
        assert by_title["Middle"]["tagOverlapPct"] == pytest.approx(50.0)
        assert by_title["Far"]["tagOverlap"] == 0
        assert by_title["Close"]["similarity"] == pytest.approx(90.0)
        assert by_title["Far"]["popularity"] == 0.0
        assert by_title["Close"]["spotifyUrl"] == "https://open.spotify.com/search/Band%20B%20Close"

    def test_preview_failure_still_listed(self, upstream, settings):
        _recommend_upstream(upstream)
        recs = _client(upstream, settings).get("/api/song/sp123").json()["recommendations"]
        middle = next(r for r in recs if r["title"] == "Middle")
        assert middle["preview_url"] is None
        assert middle["album"] == {"name": "Single/Unknown"}
        assert middle["playcount"] == 9999

    def test_malformed_deezer_fields_still_listed(self, upstream, settings):
        def deezer(request):
            return httpx.Response(200, json={"data": [{"preview": 12345, "album": {"title": 678}}]})

        _recommend_upstream(upstream, deezer_handler=deezer)
        resp = _client(upstream, settings).get("/api/song/sp123")

        assert resp.status_code == 200
        recs = resp.json()["recommendations"]
        assert len(recs) == 3
        for rec in recs:
            assert rec["preview_url"] is None
            assert rec["album"] == {"name": "Single/Unknown"}

    def test_enrichment_capped_at_eight(self, upstream, settings):
        upstream.add(SPOTIFY_ACCOUNTS, "/api/token", json={"access_token": "tok"})
        upstream.add(SPOTIFY_API, "/v1/tracks/sp123", json={"name": "Song A", "artists": [{"name": "Artist X"}]})

        def lastfm(request):
            if request.url.params["method"] == "track.getsimilar":
                return httpx.Response(200, json={"similartracks": {"track": [
                    {"name": f"Song {i}", "artist": {"name": f"Band {i}"}, "match": str(1 - i / 100)}
                    for i in range(30)
                ]}})
            return httpx.Response(200, json={"track": {"playcount": "10", "toptags": {"tag": []}}})

        upstream.add(LASTFM, "/2.0/", handler=lastfm)
        upstream.add(DEEZER, "/search", json={"data": []})

        resp = _client(upstream, make_settings(SIMILAR_LIMIT=100)).get("/api/song/sp123")

        assert resp.status_code == 200
        assert len(resp.json()["recommendations"]) == ENRICH_TOPN == 8
        assert len(upstream.requests_to(DEEZER)) == 8
        # 기준 곡 getInfo 1회 + getsimilar 1회 + 후보 8개 getInfo
        assert len(upstream.requests_to(LASTFM)) == 10
        assert "ENRICH_TOPN" not in Settings.model_fields

    def test_identical_requests_yield_identical_ids(self, upstream, settings):
        _recommend_upstream(upstream)
        client = _client(upstream, settings)
        first = [r["spotifyId"] for r in client.get("/api/song/sp123").json()["recommendations"]]
        second = [r["spotifyId"] for r in client.get("/api/song/sp123").json()["recommendations"]]
        assert first == second
        assert len(set(first)) == len(first)

    def test_unknown_track(self, upstream, settings):
        upstream.add(SPOTIFY_ACCOUNTS, "/api/token", json={"access_token": "tok"})
        resp = _client(upstream, settings).get("/api/song/nope")
        assert resp.status_code == 404
        assert "error" in resp.json()

    def test_similar_lookup_failure_is_empty_list(self, upstream, settings):
        upstream.add(SPOTIFY_ACCOUNTS, "/api/token", json={"access_token": "tok"})
        upstream.add(SPOTIFY_API, "/v1/tracks/sp123", json={"name": "Song A", "artists": [{"name": "Artist X"}]})
        upstream.add(LASTFM, "/2.0/", status_code=503, json={})
        resp = _client(upstream, settings).get("/api/song/sp123")
        assert resp.status_code == 200
        assert resp.json()["recommendations"] == []

    def test_missing_lastfm_key(self, upstream):
        client = _client(upstream, make_settings(LASTFM_API_KEY=""))
        resp = client.get("/api/song/sp123")
        assert resp.status_code == 500
        assert upstream.requests == []

    def test_token_rejected(self, upstream, settings):
        upstream.add(SPOTIFY_ACCOUNTS, "/api/token", status_code=401, json={})
        resp = _client(upstream, settings).get("/api/song/sp123")
        assert resp.status_code == 502


class TestHealth:

    def test_degraded_without_keys(self, upstream):
        resp = _client(upstream, make_settings(LASTFM_API_KEY="")).get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "degraded"
        assert body["lastfm_configured"] is False
        assert body["acrcloud_configured"] is True

    def test_ok(self, upstream, settings):
        assert _client(upstream, settings).get("/health").json()["status"] == "ok"
