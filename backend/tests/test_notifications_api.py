"""
YourTales Backend - Notification API Tests
===========================================

What we test:
    ✅ Feed is newest first with an unreadCount over all unread rows
    ✅ type / isRead filters
    ✅ Mark one, mark all, delete
    ✅ Other users' notifications look missing (404)
"""

import pytest

from conftest import auth_headers


async def make_activity(client, verified_user):
    """Author gets: 2x Manuscript Created, then a New Comment from a reader."""
    author = await verified_user(email="author@example.com")
    reader = await verified_user(email="reader@example.com", full_name="Rita Reader")
    first = (
        await client.post("/api/manuscripts", headers=auth_headers(author), json={"title": "A"})
    ).json()["manuscript"]
    await client.post("/api/manuscripts", headers=auth_headers(author), json={"title": "B"})
    chapter = (
        await client.post(
            "/api/chapters",
            headers=auth_headers(author),
            json={"manuscriptId": first["id"], "title": "One"},
        )
    ).json()["chapter"]
    await client.post(
        "/api/comments/comment",
        headers=auth_headers(reader),
        json={"chapterId": chapter["id"], "content": "Lovely"},
    )
    return author, reader


class TestNotificationFeed:

    @pytest.mark.asyncio
    async def test_feed_newest_first_with_unread_count(self, test_client, verified_user):
        author, _ = await make_activity(test_client, verified_user)

        response = await test_client.get("/api/notifications", headers=auth_headers(author))

        assert response.status_code == 200
        body = response.json()
        assert [n["title"] for n in body["notifications"]] == [
            "New Comment",
            "Manuscript Created",
            "Manuscript Created",
        ]
        assert body["unreadCount"] == 3
        assert all(n["isRead"] is False for n in body["notifications"])

    @pytest.mark.asyncio
    async def test_type_filter_keeps_full_unread_count(self, test_client, verified_user):
        author, _ = await make_activity(test_client, verified_user)

        response = await test_client.get(
            "/api/notifications", params={"type": "COMMENT"}, headers=auth_headers(author)
        )

        body = response.json()
        assert [n["type"] for n in body["notifications"]] == ["COMMENT"]
        assert body["unreadCount"] == 3

    @pytest.mark.asyncio
    async def test_invalid_type_filter(self, test_client, verified_user):
        author = await verified_user()
        response = await test_client.get(
            "/api/notifications", params={"type": "SPAM"}, headers=auth_headers(author)
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_mark_read_and_is_read_filter(self, test_client, verified_user):
        author, _ = await make_activity(test_client, verified_user)
        feed = (
            await test_client.get("/api/notifications", headers=auth_headers(author))
        ).json()["notifications"]

        marked = await test_client.patch(
            f"/api/notifications/{feed[0]['id']}/read", headers=auth_headers(author)
        )
        unread = await test_client.get(
            "/api/notifications", params={"isRead": "false"}, headers=auth_headers(author)
        )
        read = await test_client.get(
            "/api/notifications", params={"isRead": "true"}, headers=auth_headers(author)
        )

        assert marked.status_code == 200
        assert marked.json()["message"] == "Notification marked as read"
        assert marked.json()["notification"]["isRead"] is True
        assert len(unread.json()["notifications"]) == 2
        assert unread.json()["unreadCount"] == 2
        assert [n["id"] for n in read.json()["notifications"]] == [feed[0]["id"]]

    @pytest.mark.asyncio
    async def test_mark_all_read(self, test_client, verified_user):
        author, _ = await make_activity(test_client, verified_user)

        response = await test_client.patch(
            "/api/notifications/mark-all-read", headers=auth_headers(author)
        )
        feed = await test_client.get("/api/notifications", headers=auth_headers(author))

        assert response.status_code == 200
        assert response.json()["message"] == "All notifications marked as read"
        assert feed.json()["unreadCount"] == 0
        assert all(n["isRead"] for n in feed.json()["notifications"])

    @pytest.mark.asyncio
    async def test_delete(self, test_client, verified_user):
        author, _ = await make_activity(test_client, verified_user)
        feed = (
            await test_client.get("/api/notifications", headers=auth_headers(author))
        ).json()["notifications"]

        response = await test_client.delete(
            f"/api/notifications/{feed[0]['id']}", headers=auth_headers(author)
        )
        after = await test_client.get("/api/notifications", headers=auth_headers(author))

        assert response.status_code == 200
        assert response.json()["message"] == "Notification deleted"
        assert len(after.json()["notifications"]) == 2

    @pytest.mark.asyncio
    async def test_other_users_notification_is_not_found(self, test_client, verified_user):
        author, reader = await make_activity(test_client, verified_user)
        feed = (
            await test_client.get("/api/notifications", headers=auth_headers(author))
        ).json()["notifications"]

        read = await test_client.patch(
            f"/api/notifications/{feed[0]['id']}/read", headers=auth_headers(reader)
        )
        delete = await test_client.delete(
            f"/api/notifications/{feed[0]['id']}", headers=auth_headers(reader)
        )

        assert read.status_code == 404
        assert read.json()["message"] == "Notification not found"
        assert delete.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_auth(self, test_client):
        response = await test_client.get("/api/notifications")
        assert response.status_code == 401
