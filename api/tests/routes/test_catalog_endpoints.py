"""Tests for track, playlist, artist and health routes."""

from app.db.database import Database

OWNER = {"X-User-Id": "uploader-1"}


class TestTrackEndpoints:
    def test_create_requires_authentication(self, client):
        response = client.post(
            "/tracks", json={"title": "x", "artist": "y", "duration": 10}
        )
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_ERROR"

    def test_create_get_list(self, client, create_track):
        track = create_track("Harbor")

        assert client.get(f"/tracks/{track['id']}").json()["title"] == "Harbor"
        listing = client.get("/tracks").json()
        assert [t["id"] for t in listing["tracks"]] == [track["id"]]
        mine = client.get("/tracks/mine", headers=OWNER).json()
        assert [t["id"] for t in mine] == [track["id"]]

    def test_get_missing_track(self, client):
        assert client.get("/tracks/nope").status_code == 404

    def test_delete_track(self, client, create_track):
        track = create_track()

        forbidden = client.delete(
            f"/tracks/{track['id']}", headers={"X-User-Id": "intruder"}
        )
        assert forbidden.status_code == 403

        deleted = client.delete(f"/tracks/{track['id']}", headers=OWNER)
        assert deleted.status_code == 204
        assert client.get(f"/tracks/{track['id']}").status_code == 404


class TestPlaylistEndpoints:
    def test_playlist_flow(self, client, create_track):
        track = create_track()

        created = client.post(
            "/playlists", json={"name": "Evening"}, headers=OWNER
        )
        assert created.status_code == 201
        playlist_id = created.json()["id"]

        added = client.post(
            f"/playlists/{playlist_id}/tracks",
            json={"track_id": track["id"]},
            headers=OWNER,
        )
        assert added.json()["track_ids"] == [track["id"]]

        view = client.get(f"/playlists/{playlist_id}", headers=OWNER).json()
        assert [t["id"] for t in view["tracks"]] == [track["id"]]

        listing = client.get("/playlists", headers=OWNER).json()
        assert [p["id"] for p in listing["playlists"]] == [playlist_id]

        removed = client.delete(
            f"/playlists/{playlist_id}/tracks/{track['id']}", headers=OWNER
        )
        assert removed.json()["track_ids"] == []

    def test_private_playlist_hidden_from_others(self, client):
        playlist_id = client.post(
            "/playlists", json={"name": "Secret"}, headers=OWNER
        ).json()["id"]

        response = client.get(
            f"/playlists/{playlist_id}", headers={"X-User-Id": "stranger"}
        )
        assert response.status_code == 404


class TestHealthEndpoints:
    def test_health_reports_database(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["services"]["database"] == "healthy"
        assert body["services"]["trending_refresh"] == "disabled"

    def test_liveness_and_readiness(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}
        assert client.get("/health/ready").json() == {"status": "ready"}

    def test_ready_is_503_until_database_initialized(self, app, client, tmp_path):
        app.state.database = Database(str(tmp_path / "not-yet.db"))

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json() == {"status": "initializing"}
        assert client.get("/health").json()["services"]["database"] == "initializing"


class TestArtistEndpoints:
    def test_save_requires_authentication(self, client):
        response = client.put("/artists/me", json={"display_name": "Night Shift"})
        assert response.status_code == 401

    def test_profile_flow(self, client, create_track):
        track = create_track()

        saved = client.put(
            "/artists/me",
            json={
                "display_name": "Night Shift",
                "social_links": {"bandcamp": "https://nightshift.example"},
            },
            headers=OWNER,
        )
        assert saved.status_code == 200
        profile = saved.json()
        assert profile["slug"] == "night-shift"

        updated = client.put(
            "/artists/me", json={"display_name": "Night Shift", "bio": "hi"}, headers=OWNER
        ).json()
        assert updated["id"] == profile["id"]
        assert updated["social_links"]["bandcamp"] == "https://nightshift.example"

        assert client.get("/artists/me", headers=OWNER).json()["id"] == profile["id"]
        assert client.get("/artists/me").json() is None
        assert client.get("/artists/by-name/night-shift").json()["id"] == profile["id"]
        assert client.get(f"/artists/{OWNER['X-User-Id']}").json()["bio"] == "hi"
        listing = client.get("/artists").json()["artists"]
        assert [a["id"] for a in listing] == [profile["id"]]
        tracks = client.get(f"/artists/{OWNER['X-User-Id']}/tracks").json()
        assert [t["id"] for t in tracks] == [track["id"]]

    def test_unknown_artist_returns_404(self, client):
        assert client.get("/artists/nobody").status_code == 404
        response = client.get("/artists/by-name/nobody")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"
