"""
Tests for the feedback HTTP routes.

Tests cover:
- Reaction submit/update/delete and the error envelope
- Summary, stream and trending reads
- Admin-only trending computation
- Cache headers on public aggregate reads
"""

USER = {"X-User-Id": "listener-1"}
OTHER_USER = {"X-User-Id": "listener-2"}


def _submit(client, track_id, kind="love", headers=None, **extra):
    body = {"track_id": track_id, "kind": kind, **extra}
    return client.post("/feedback/reactions", json=body, headers=headers or {})


# =============================================================================
# Reactions
# =============================================================================


class TestSubmitReactionEndpoint:
    def test_submit_and_read_summary(self, client, create_track):
        track = create_track()

        response = _submit(client, track["id"], headers=USER)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["feedback_id"]
        assert body["session_id"]

        summary = client.get(f"/feedback/tracks/{track['id']}/summary").json()
        assert summary["love_count"] == 1
        assert summary["total_count"] == 1
        assert summary["average_score"] == 4.0

    def test_unknown_track_returns_404_envelope(self, client):
        response = _submit(client, "missing", headers=USER)

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "RESOURCE_NOT_FOUND"
        assert error["status_code"] == 404

    def test_invalid_kind_is_rejected(self, client, create_track):
        track = create_track()
        response = _submit(client, track["id"], kind="adore", headers=USER)
        assert response.status_code == 422

    def test_anonymous_submission_returns_generated_session(self, client, create_track):
        track = create_track()

        first = _submit(client, track["id"], kind="like").json()
        assert first["session_id"].startswith("anon_")

        second = _submit(
            client, track["id"], kind="meh", session_id=first["session_id"]
        ).json()
        assert second["feedback_id"] == first["feedback_id"]

        summary = client.get(f"/feedback/tracks/{track['id']}/summary").json()
        assert summary["total_count"] == 1
        assert summary["meh_count"] == 1

    def test_session_header_identifies_anonymous_caller(self, client, create_track):
        track = create_track()
        headers = {"X-Session-Id": "header-session"}

        first = _submit(client, track["id"], kind="like", headers=headers).json()
        second = _submit(client, track["id"], kind="love", headers=headers).json()

        assert first["session_id"] == "header-session"
        assert first["feedback_id"] == second["feedback_id"]

    def test_rate_limit_returns_429(self, client, create_track):
        tracks = [create_track(title=f"T{i}") for i in range(31)]
        for track in tracks[:30]:
            assert _submit(client, track["id"], headers=USER).status_code == 200

        response = _submit(client, tracks[30]["id"], headers=USER)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert response.json()["error"]["code"] == "RATE_LIMITED"


class TestChangeReactionEndpoints:
    def test_update_and_delete_own_reaction(self, client, create_track):
        track = create_track()
        reaction_id = _submit(client, track["id"], headers=USER).json()["feedback_id"]

        response = client.patch(
            f"/feedback/reactions/{reaction_id}", json={"kind": "dislike"}, headers=USER
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}
        summary = client.get(f"/feedback/tracks/{track['id']}/summary").json()
        assert summary["dislike_count"] == 1

        response = client.delete(f"/feedback/reactions/{reaction_id}", headers=USER)
        assert response.status_code == 200
        summary = client.get(f"/feedback/tracks/{track['id']}/summary").json()
        assert summary["total_count"] == 0

    def test_other_user_gets_403(self, client, create_track):
        track = create_track()
        reaction_id = _submit(client, track["id"], headers=USER).json()["feedback_id"]

        response = client.patch(
            f"/feedback/reactions/{reaction_id}",
            json={"kind": "dislike"},
            headers=OTHER_USER,
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "NOT_AUTHORIZED"

    def test_anonymous_reaction_needs_its_session(self, client, create_track):
        track = create_track()
        created = _submit(client, track["id"], kind="like").json()
        reaction_id = created["feedback_id"]

        denied = client.delete(
            f"/feedback/reactions/{reaction_id}", params={"session_id": "guess"}
        )
        assert denied.status_code == 403

        allowed = client.patch(
            f"/feedback/reactions/{reaction_id}",
            json={"kind": "love", "session_id": created["session_id"]},
        )
        assert allowed.status_code == 200

        removed = client.delete(
            f"/feedback/reactions/{reaction_id}",
            headers={"X-Session-Id": created["session_id"]},
        )
        assert removed.status_code == 200

    def test_missing_reaction_returns_404(self, client):
        response = client.delete("/feedback/reactions/does-not-exist", headers=USER)
        assert response.status_code == 404


class TestReadEndpoints:
    def test_my_reactions(self, client, create_track):
        a, b = create_track("A"), create_track("B")
        _submit(client, a["id"], headers=USER)
        _submit(client, b["id"], kind="meh", headers=USER)
        _submit(client, a["id"], headers=OTHER_USER)

        mine = client.get("/feedback/reactions/me", headers=USER).json()["reactions"]
        assert {r["track_id"] for r in mine} == {a["id"], b["id"]}

        filtered = client.get(
            "/feedback/reactions/me", params={"track_id": b["id"]}, headers=USER
        ).json()["reactions"]
        assert [r["kind"] for r in filtered] == ["meh"]

        assert client.get("/feedback/reactions/me").json() == {"reactions": []}

    def test_summary_of_unrated_track_is_zero(self, client):
        response = client.get("/feedback/tracks/unknown/summary")

        assert response.status_code == 200
        assert response.json()["total_count"] == 0
        assert response.json()["average_score"] == 0.0

    def test_stream_unknown_sort_falls_back_to_recent(self, client, create_track):
        track = create_track()
        _submit(client, track["id"], headers=USER)

        body = client.get("/feedback/stream", params={"sort_by": "loudest"}).json()

        assert body["sort_by"] == "recent"
        assert [item["track"]["id"] for item in body["items"]] == [track["id"]]

    def test_stream_limit_is_bounded(self, client):
        assert client.get("/feedback/stream", params={"limit": 0}).status_code == 422
        assert client.get("/feedback/stream", params={"limit": 101}).status_code == 422


# =============================================================================
# Trending
# =============================================================================


class TestTrendingEndpoints:
    def test_compute_requires_admin_key(self, client):
        assert client.post("/admin/trending/compute").status_code == 401
        response = client.post(
            "/admin/trending/compute", headers={"X-API-KEY": "wrong-key"}
        )
        assert response.status_code == 403

    def test_compute_then_read(self, client, create_track, api_settings):
        track = create_track()
        _submit(client, track["id"], headers=USER)

        response = client.post(
            "/admin/trending/compute",
            params={"timeframe": "1h"},
            headers={"X-API-KEY": api_settings.ADMIN_API_KEY},
        )
        assert response.status_code == 200
        assert response.json() == {"processed_count": 1, "timeframe": "1h"}

        body = client.get("/feedback/trending", params={"timeframe": "1h"}).json()
        assert body["timeframe"] == "1h"
        assert body["category"] == "all"
        [item] = body["tracks"]
        assert item["track"]["id"] == track["id"]
        assert item["trending_rank"] == 1
        assert item["feedback_summary"]["love_count"] == 1

    def test_compute_accepts_bearer_token(self, client, api_settings):
        response = client.post(
            "/admin/trending/compute",
            headers={"Authorization": f"Bearer {api_settings.ADMIN_API_KEY}"},
        )
        assert response.status_code == 200
        assert response.json()["timeframe"] == "24h"

    def test_compute_all(self, client, api_settings):
        response = client.post(
            "/admin/trending/compute-all",
            headers={"X-API-KEY": api_settings.ADMIN_API_KEY},
        )
        assert response.status_code == 200
        assert [r["timeframe"] for r in response.json()] == ["1h", "24h", "7d", "30d"]

    def test_trending_defaults_to_day_window(self, client):
        body = client.get("/feedback/trending").json()
        assert body == {"timeframe": "24h", "category": "all", "tracks": []}


class TestCacheHeaders:
    def test_public_aggregates_are_cacheable(self, client):
        trending = client.get("/feedback/trending")
        summary = client.get("/feedback/tracks/abc/summary")

        assert trending.headers["Cache-Control"].startswith("public")
        assert summary.headers["Cache-Control"].startswith("public")

    def test_personal_reads_are_not_cached(self, client):
        response = client.get("/feedback/reactions/me", headers=USER)
        assert "no-store" in response.headers["Cache-Control"]
        assert response.headers["Pragma"] == "no-cache"
