"""
YourTales Backend - Comment & Review API Tests
===============================================

What we test:
    ✅ Comments list oldest first, reviews newest first, both with authors
    ✅ Feedback from others notifies the manuscript author; self-feedback does not
    ✅ Rating bounds (422) and missing chapters (404)
    ✅ Only a comment's author may delete it
"""

import pytest

from conftest import auth_headers


async def setup_chapter(client, verified_user):
    author = await verified_user(email="author@example.com", full_name="Ann Author")
    manuscript = (
        await client.post("/api/manuscripts", headers=auth_headers(author), json={"title": "Book"})
    ).json()["manuscript"]
    chapter = (
        await client.post(
            "/api/chapters",
            headers=auth_headers(author),
            json={"manuscriptId": manuscript["id"], "title": "Chapter One", "order": 1},
        )
    ).json()["chapter"]
    return author, manuscript, chapter


async def feed(client, login):
    response = await client.get("/api/notifications", headers=auth_headers(login))
    return response.json()["notifications"]


class TestComments:

    @pytest.mark.asyncio
    async def test_comment_notifies_author(self, test_client, verified_user):
        author, manuscript, chapter = await setup_chapter(test_client, verified_user)
        reader = await verified_user(email="reader@example.com", full_name="Rita Reader")
        text = "What a gripping opening chapter, I could not put it down at all!"

        response = await test_client.post(
            "/api/comments/comment",
            headers=auth_headers(reader),
            json={"chapterId": chapter["id"], "content": text},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Comment added"
        assert body["comment"]["author"]["fullName"] == "Rita Reader"

        notes = await feed(test_client, author)
        comment_notes = [n for n in notes if n["type"] == "COMMENT"]
        assert len(comment_notes) == 1
        assert comment_notes[0]["title"] == "New Comment"
        assert comment_notes[0]["message"] == (
            f'Rita Reader commented on Chapter "Chapter One": "{text[:30]}..."'
        )
        assert comment_notes[0]["data"] == {
            "manuscriptId": manuscript["id"],
            "chapterId": chapter["id"],
            "commentId": body["comment"]["id"],
        }

    @pytest.mark.asyncio
    async def test_own_comment_does_not_notify(self, test_client, verified_user):
        author, _, chapter = await setup_chapter(test_client, verified_user)

        await test_client.post(
            "/api/comments/comment",
            headers=auth_headers(author),
            json={"chapterId": chapter["id"], "content": "Note to self"},
        )

        assert not [n for n in await feed(test_client, author) if n["type"] == "COMMENT"]

    @pytest.mark.asyncio
    async def test_list_oldest_first(self, test_client, verified_user):
        author, _, chapter = await setup_chapter(test_client, verified_user)
        for content in ("first", "second"):
            await test_client.post(
                "/api/comments/comment",
                headers=auth_headers(author),
                json={"chapterId": chapter["id"], "content": content},
            )

        response = await test_client.get(f"/api/comments/comment/chapter/{chapter['id']}")

        assert response.status_code == 200
        comments = response.json()["comments"]
        assert [c["content"] for c in comments] == ["first", "second"]
        assert comments[0]["author"]["fullName"] == "Ann Author"

    @pytest.mark.asyncio
    async def test_comment_on_missing_chapter(self, test_client, verified_user):
        reader = await verified_user()
        response = await test_client.post(
            "/api/comments/comment",
            headers=auth_headers(reader),
            json={"chapterId": 999, "content": "Hello?"},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_only_comment_author_deletes(self, test_client, verified_user):
        author, _, chapter = await setup_chapter(test_client, verified_user)
        reader = await verified_user(email="reader@example.com")
        comment = (
            await test_client.post(
                "/api/comments/comment",
                headers=auth_headers(reader),
                json={"chapterId": chapter["id"], "content": "Mine"},
            )
        ).json()["comment"]

        by_author = await test_client.delete(
            f"/api/comments/comment/{comment['id']}", headers=auth_headers(author)
        )
        by_reader = await test_client.delete(
            f"/api/comments/comment/{comment['id']}", headers=auth_headers(reader)
        )
        again = await test_client.delete(
            f"/api/comments/comment/{comment['id']}", headers=auth_headers(reader)
        )

        assert by_author.status_code == 403
        assert by_reader.status_code == 200
        assert by_reader.json()["message"] == "Comment deleted"
        assert again.status_code == 404


class TestReviews:

    @pytest.mark.asyncio
    async def test_review_notifies_author(self, test_client, verified_user):
        author, _, chapter = await setup_chapter(test_client, verified_user)
        reader = await verified_user(email="reader@example.com", full_name="Rita Reader")

        response = await test_client.post(
            "/api/comments/review",
            headers=auth_headers(reader),
            json={"chapterId": chapter["id"], "rating": 4, "content": "Solid"},
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Review submitted"
        assert response.json()["review"]["rating"] == 4

        reviews = [n for n in await feed(test_client, author) if n["title"] == "New Review"]
        assert len(reviews) == 1
        assert reviews[0]["type"] == "SYSTEM"
        assert reviews[0]["message"] == 'Rita Reader gave a 4-star review on Chapter "Chapter One".'

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 6])
    async def test_rating_out_of_range(self, test_client, verified_user, rating):
        _, _, chapter = await setup_chapter(test_client, verified_user)
        reader = await verified_user(email="reader@example.com")

        response = await test_client.post(
            "/api/comments/review",
            headers=auth_headers(reader),
            json={"chapterId": chapter["id"], "rating": rating},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_newest_first(self, test_client, verified_user):
        author, _, chapter = await setup_chapter(test_client, verified_user)
        for rating in (2, 5):
            await test_client.post(
                "/api/comments/review",
                headers=auth_headers(author),
                json={"chapterId": chapter["id"], "rating": rating},
            )

        response = await test_client.get(f"/api/comments/review/chapter/{chapter['id']}")

        assert [r["rating"] for r in response.json()["reviews"]] == [5, 2]
        assert response.json()["reviews"][0]["author"]["fullName"] == "Ann Author"
