"""
YourTales Backend - Chapter API Tests
======================================

What we test:
    ✅ Listing is public and sorted by `order`
    ✅ Author and accepted editors write; only the author deletes
    ✅ Missing manuscript / chapter → 404
"""

import pytest

from conftest import auth_headers


async def setup_manuscript(client, verified_user):
    author = await verified_user(email="author@example.com")
    response = await client.post(
        "/api/manuscripts", headers=auth_headers(author), json={"title": "Book"}
    )
    return author, response.json()["manuscript"]


async def add_chapter(client, login, manuscript_id, title, order=0, content=""):
    return await client.post(
        "/api/chapters",
        headers=auth_headers(login),
        json={"manuscriptId": manuscript_id, "title": title, "order": order, "content": content},
    )


async def accepted_editor(client, verified_user, author, manuscript_id):
    editor = await verified_user(email="ed@example.com")
    invitation = await client.post(
        "/api/manuscripts/invite",
        headers=auth_headers(author),
        json={"manuscriptId": manuscript_id, "email": "ed@example.com", "role": "EDITOR"},
    )
    await client.post(
        "/api/manuscripts/respond",
        headers=auth_headers(editor),
        json={"collaborationId": invitation.json()["collaboration"]["id"], "status": "ACCEPTED"},
    )
    return editor


class TestChapterListing:

    @pytest.mark.asyncio
    async def test_sorted_by_order(self, test_client, verified_user):
        author, manuscript = await setup_manuscript(test_client, verified_user)
        await add_chapter(test_client, author, manuscript["id"], "Three", order=3)
        await add_chapter(test_client, author, manuscript["id"], "One", order=1)
        await add_chapter(test_client, author, manuscript["id"], "Two", order=2)

        response = await test_client.get(f"/api/chapters/manuscript/{manuscript['id']}")

        assert response.status_code == 200
        chapters = response.json()["chapters"]
        assert [c["title"] for c in chapters] == ["One", "Two", "Three"]
        assert [c["order"] for c in chapters] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_missing_manuscript(self, test_client):
        response = await test_client.get("/api/chapters/manuscript/999")

        assert response.status_code == 404
        assert response.json()["message"] == "Manuscript not found"

    @pytest.mark.asyncio
    async def test_empty_manuscript(self, test_client, verified_user):
        _, manuscript = await setup_manuscript(test_client, verified_user)
        response = await test_client.get(f"/api/chapters/manuscript/{manuscript['id']}")
        assert response.json() == {"chapters": []}


class TestChapterWrites:

    @pytest.mark.asyncio
    async def test_author_creates(self, test_client, verified_user):
        author, manuscript = await setup_manuscript(test_client, verified_user)

        response = await add_chapter(
            test_client, author, manuscript["id"], "Opening", order=1, content="It was dark."
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Chapter created successfully"
        assert body["chapter"]["manuscriptId"] == manuscript["id"]
        assert body["chapter"]["content"] == "It was dark."

    @pytest.mark.asyncio
    async def test_create_in_missing_manuscript(self, test_client, verified_user):
        author = await verified_user()
        response = await add_chapter(test_client, author, 999, "Lost")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_negative_order_rejected(self, test_client, verified_user):
        author, manuscript = await setup_manuscript(test_client, verified_user)
        response = await add_chapter(test_client, author, manuscript["id"], "Bad", order=-1)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_stranger_cannot_create(self, test_client, verified_user):
        _, manuscript = await setup_manuscript(test_client, verified_user)
        stranger = await verified_user(email="stranger@example.com")

        response = await add_chapter(test_client, stranger, manuscript["id"], "Intrusion")

        assert response.status_code == 403
        assert response.json()["message"] == "Only authors or editors can create chapters"

    @pytest.mark.asyncio
    async def test_accepted_editor_creates_and_updates_but_cannot_delete(
        self, test_client, verified_user
    ):
        author, manuscript = await setup_manuscript(test_client, verified_user)
        editor = await accepted_editor(test_client, verified_user, author, manuscript["id"])

        created = await add_chapter(test_client, editor, manuscript["id"], "Editor's cut")
        chapter_id = created.json()["chapter"]["id"]
        updated = await test_client.patch(
            f"/api/chapters/{chapter_id}",
            headers=auth_headers(editor),
            json={"content": "Tightened prose", "order": 4},
        )
        deleted = await test_client.delete(
            f"/api/chapters/{chapter_id}", headers=auth_headers(editor)
        )

        assert created.status_code == 201
        assert updated.status_code == 200
        assert updated.json()["chapter"]["content"] == "Tightened prose"
        assert updated.json()["chapter"]["order"] == 4
        assert updated.json()["chapter"]["title"] == "Editor's cut"
        assert deleted.status_code == 403
        assert deleted.json()["message"] == "Only the author can delete chapters"

    @pytest.mark.asyncio
    async def test_stranger_cannot_update(self, test_client, verified_user):
        author, manuscript = await setup_manuscript(test_client, verified_user)
        chapter = (await add_chapter(test_client, author, manuscript["id"], "Mine")).json()
        stranger = await verified_user(email="stranger@example.com")

        response = await test_client.patch(
            f"/api/chapters/{chapter['chapter']['id']}",
            headers=auth_headers(stranger),
            json={"title": "Theirs"},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_author_deletes(self, test_client, verified_user):
        author, manuscript = await setup_manuscript(test_client, verified_user)
        chapter = (await add_chapter(test_client, author, manuscript["id"], "Gone")).json()

        response = await test_client.delete(
            f"/api/chapters/{chapter['chapter']['id']}", headers=auth_headers(author)
        )
        listing = await test_client.get(f"/api/chapters/manuscript/{manuscript['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Chapter deleted successfully"
        assert listing.json()["chapters"] == []

    @pytest.mark.asyncio
    async def test_update_missing_chapter(self, test_client, verified_user):
        author = await verified_user()
        response = await test_client.patch(
            "/api/chapters/999", headers=auth_headers(author), json={"title": "x"}
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Chapter not found"
