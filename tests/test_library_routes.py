"""Personal library entries, filters, stats and shared libraries."""

from sqlalchemy import func, select

from conftest import API, auth
from mediatrack.models.library_model import UserMedia


class TestAddEntry:
    async def test_defaults(self, api):
        token = await api.token("bob")
        media = await api.create_media(token, "Heat")
        entry = await api.add_to_library(token, media["id"])
        assert entry["favorite"] is False
        assert entry["watched"] is False
        assert entry["rating"] is None
        assert entry["media"]["title"] == "Heat"

    async def test_with_initial_fields(self, api):
        token = await api.token("bob")
        media = await api.create_media(token, "Heat")
        entry = await api.add_to_library(token, media["id"], favorite=True, rating=9, notes="Rewatch")
        assert entry["favorite"] is True
        assert entry["rating"] == 9
        assert entry["notes"] == "Rewatch"

    async def test_duplicate_keeps_single_row(self, client, api, session_factory):
        token = await api.token("bob")
        media = await api.create_media(token, "Heat")
        await api.add_to_library(token, media["id"])

        res = await client.post(f"{API}/library/{media['id']}", headers=auth(token))
        assert res.status_code == 400
        assert res.json() == {"err": "Media already in library"}

        async with session_factory() as s:
            count = (
                await s.execute(select(func.count(UserMedia.media_id)).where(UserMedia.media_id == media["id"]))
            ).scalar_one()
        assert count == 1

    async def test_missing_media(self, client, api):
        token = await api.token("bob")
        res = await client.post(f"{API}/library/999", headers=auth(token))
        assert res.status_code == 404
        assert res.json() == {"err": "Media not found"}

    async def test_rating_out_of_range(self, client, api):
        token = await api.token("bob")
        media = await api.create_media(token, "Heat")
        res = await client.post(f"{API}/library/{media['id']}", json={"rating": 12}, headers=auth(token))
        assert res.status_code == 400
        assert "rating" in res.json()["errors"]


class TestEntryScope:
    async def test_update_and_remove_only_touch_own_entry(self, client, api):
        bob = await api.token("bob")
        carol = await api.token("carol")
        media = await api.create_media(bob, "Heat")
        await api.add_to_library(bob, media["id"])

        res = await client.put(f"{API}/library/{media['id']}", json={"watched": True}, headers=auth(carol))
        assert res.status_code == 404
        res = await client.delete(f"{API}/library/{media['id']}", headers=auth(carol))
        assert res.status_code == 404

        mine = await client.get(f"{API}/library/{media['id']}", headers=auth(bob))
        assert mine.json()["watched"] is False

    async def test_update_sent_fields_only(self, client, api):
        token = await api.token("bob")
        media = await api.create_media(token, "Heat")
        await api.add_to_library(token, media["id"], favorite=True, notes="Great score")

        res = await client.put(f"{API}/library/{media['id']}", json={"watched": True, "rating": 8}, headers=auth(token))
        assert res.status_code == 200
        body = res.json()
        assert body["watched"] is True
        assert body["favorite"] is True
        assert body["notes"] == "Great score"
        assert body["rating"] == 8

    async def test_null_flag_is_rejected(self, client, api):
        token = await api.token("bob")
        media = await api.create_media(token, "Heat")
        await api.add_to_library(token, media["id"])
        res = await client.put(f"{API}/library/{media['id']}", json={"favorite": None}, headers=auth(token))
        assert res.status_code == 400

    async def test_remove(self, client, api):
        token = await api.token("bob")
        media = await api.create_media(token, "Heat")
        await api.add_to_library(token, media["id"])

        res = await client.delete(f"{API}/library/{media['id']}", headers=auth(token))
        assert res.status_code == 200
        assert res.json() == {"message": "Media removed from library"}
        assert (await client.get(f"{API}/library/{media['id']}", headers=auth(token))).status_code == 404


class TestListings:
    async def test_favorites_and_watched(self, client, api):
        token = await api.token("bob")
        a = await api.create_media(token, "Alien")
        b = await api.create_media(token, "Brazil")
        c = await api.create_media(token, "Cube")
        await api.add_to_library(token, a["id"], favorite=True)
        await api.add_to_library(token, b["id"], watched=True)
        await api.add_to_library(token, c["id"], favorite=True, watched=True)

        everything = (await client.get(f"{API}/library", headers=auth(token))).json()
        favorites = (await client.get(f"{API}/library/favorites", headers=auth(token))).json()
        watched = (await client.get(f"{API}/library/watched", headers=auth(token))).json()

        assert everything["total"] == 3
        assert {e["mediaId"] for e in favorites["data"]} == {a["id"], c["id"]}
        assert {e["mediaId"] for e in watched["data"]} == {b["id"], c["id"]}

    async def test_only_own_entries_are_listed(self, client, api):
        bob = await api.token("bob")
        carol = await api.token("carol")
        media = await api.create_media(bob, "Heat")
        await api.add_to_library(bob, media["id"])

        res = await client.get(f"{API}/library", headers=auth(carol))
        assert res.json()["total"] == 0


class TestStats:
    async def test_counts_and_average(self, client, api):
        token = await api.token("bob")
        ids = [(await api.create_media(token, title))["id"] for title in ("A1", "A2", "A3", "A4")]
        await api.add_to_library(token, ids[0], rating=8, favorite=True, notes="  ")
        await api.add_to_library(token, ids[1], rating=6, watched=True, notes="Slow start")
        await api.add_to_library(token, ids[2], rating=10, calendarAt="2030-01-01T20:00:00Z")
        await api.add_to_library(token, ids[3])

        stats = (await client.get(f"{API}/library/stats", headers=auth(token))).json()
        assert stats == {
            "total": 4,
            "favorites": 1,
            "watched": 1,
            "withNotes": 1,
            "scheduled": 1,
            "averageRating": 8.0,
        }

    async def test_average_is_null_without_ratings(self, client, api):
        token = await api.token("bob")
        media = await api.create_media(token, "Heat")
        await api.add_to_library(token, media["id"])

        stats = (await client.get(f"{API}/library/stats", headers=auth(token))).json()
        assert stats["total"] == 1
        assert stats["averageRating"] is None

    async def test_empty_library(self, client, api):
        token = await api.token("bob")
        stats = (await client.get(f"{API}/library/stats", headers=auth(token))).json()
        assert stats["total"] == 0
        assert stats["averageRating"] is None


class TestSharedLibrary:
    async def test_public_library_hides_private_fields(self, client, api):
        bob = await api.token("bob")
        carol = await api.token("carol")
        media = await api.create_media(bob, "Heat")
        await api.add_to_library(bob, media["id"], rating=9, notes="only for me")

        res = await client.get(f"{API}/library/user/bob", headers=auth(carol))
        assert res.status_code == 200
        entry = res.json()["data"][0]
        assert entry["rating"] == 9
        assert "notes" not in entry
        assert "calendarAt" not in entry

    async def test_private_library(self, client, api):
        admin = await api.token("admin")
        bob = await api.token("bob")
        carol = await api.token("carol")
        media = await api.create_media(bob, "Heat")
        await api.add_to_library(bob, media["id"])
        await client.put(f"{API}/users/me/privacy", json={"privacy": "PRIVATE"}, headers=auth(bob))

        denied = await client.get(f"{API}/library/user/bob", headers=auth(carol))
        assert denied.status_code == 403
        assert denied.json() == {"err": "This user's library is private"}

        as_admin = await client.get(f"{API}/library/user/bob", headers=auth(admin))
        assert as_admin.status_code == 200
        assert as_admin.json()["total"] == 1

        as_owner = await client.get(f"{API}/library/user/bob", headers=auth(bob))
        assert as_owner.status_code == 200

    async def test_unknown_user(self, client, api):
        token = await api.token("bob")
        res = await client.get(f"{API}/library/user/nobody", headers=auth(token))
        assert res.status_code == 404
