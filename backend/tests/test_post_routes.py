"""
Notify Backend: Post Endpoint Tests
====================================

What:  Multipart create/update, public reads, likes and comments over HTTP.
"""

from uuid import uuid4

import pytest


async def _create_post(client, headers, png, description="Hello"):
    return await client.post(
        "/api/posts",
        data={"description": description},
        files={"image": ("photo.png", png, "image/png")},
        headers=headers,
    )


class TestPostEndpoints:

    @pytest.mark.asyncio
    async def test_create_requires_token(self, test_client, sample_png_bytes):
        response = await _create_post(test_client, {}, sample_png_bytes)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_and_read_back(self, test_client, auth_headers, alice, sample_png_bytes):
        created = await _create_post(test_client, auth_headers(alice), sample_png_bytes)

        assert created.status_code == 201
        data = created.json()["data"]
        assert data["description"] == "Hello"
        assert data["image"].startswith("data:image/png;base64,")
        assert data["user"]["id"] == str(alice.id)
        assert data["likesCount"] == 0

        fetched = await test_client.get(f"/api/posts/{data['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["data"]["id"] == data["id"]

    @pytest.mark.asyncio
    async def test_create_without_image_is_400(self, test_client, auth_headers, alice):
        response = await test_client.post(
            "/api/posts", data={"description": "No picture"}, headers=auth_headers(alice)
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Image file is required"

    @pytest.mark.asyncio
    async def test_create_with_wrong_file_type_is_400(self, test_client, auth_headers, alice):
        response = await test_client.post(
            "/api/posts",
            data={"description": "Not an image"},
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers(alice),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert response.json()["details"]["field"] == "image"

    @pytest.mark.asyncio
    async def test_feed_pagination(self, test_client, auth_headers, alice, bob, sample_png_bytes):
        await _create_post(test_client, auth_headers(alice), sample_png_bytes, "one")
        await _create_post(test_client, auth_headers(bob), sample_png_bytes, "two")

        feed = await test_client.get("/api/posts?page=1&limit=1")
        per_user = await test_client.get(f"/api/posts/user/{bob.id}")

        assert feed.json()["pagination"]["total"] == 2
        assert feed.json()["pagination"]["hasMore"] is True
        assert [p["description"] for p in per_user.json()["data"]] == ["two"]

    @pytest.mark.asyncio
    async def test_update_by_other_user_is_403(self, test_client, auth_headers, alice, bob, sample_png_bytes):
        post_id = (await _create_post(test_client, auth_headers(alice), sample_png_bytes)).json()["data"]["id"]

        response = await test_client.put(
            f"/api/posts/{post_id}", data={"description": "Hijacked"}, headers=auth_headers(bob)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_update_by_author(self, test_client, auth_headers, alice, sample_png_bytes):
        post_id = (await _create_post(test_client, auth_headers(alice), sample_png_bytes)).json()["data"]["id"]

        response = await test_client.put(
            f"/api/posts/{post_id}", data={"description": "Edited"}, headers=auth_headers(alice)
        )

        assert response.status_code == 200
        assert response.json()["data"]["description"] == "Edited"

    @pytest.mark.asyncio
    async def test_delete_unknown_post_is_404(self, test_client, auth_headers, alice):
        response = await test_client.delete(f"/api/posts/{uuid4()}", headers=auth_headers(alice))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_like_toggle(self, test_client, auth_headers, alice, bob, sample_png_bytes):
        post_id = (await _create_post(test_client, auth_headers(alice), sample_png_bytes)).json()["data"]["id"]

        liked = await test_client.post(f"/api/posts/{post_id}/like", headers=auth_headers(bob))
        unliked = await test_client.post(f"/api/posts/{post_id}/like", headers=auth_headers(bob))

        assert liked.json()["data"] == {"likesCount": 1, "isLiked": True}
        assert unliked.json()["data"] == {"likesCount": 0, "isLiked": False}

    @pytest.mark.asyncio
    async def test_comment_lifecycle(self, test_client, auth_headers, alice, bob, carol, sample_png_bytes):
        post_id = (await _create_post(test_client, auth_headers(alice), sample_png_bytes)).json()["data"]["id"]

        added = await test_client.post(
            f"/api/posts/{post_id}/comments", json={"text": "Nice!"}, headers=auth_headers(bob)
        )
        assert added.status_code == 201
        comment_id = added.json()["data"]["id"]
        assert added.json()["data"]["user"]["name"] == "Bob"

        forbidden = await test_client.delete(
            f"/api/posts/{post_id}/comments/{comment_id}", headers=auth_headers(carol)
        )
        assert forbidden.status_code == 403

        deleted = await test_client.delete(
            f"/api/posts/{post_id}/comments/{comment_id}", headers=auth_headers(alice)
        )
        assert deleted.status_code == 200

        post = await test_client.get(f"/api/posts/{post_id}")
        assert post.json()["data"]["comments"] == []

    @pytest.mark.asyncio
    async def test_script_disguised_as_png_is_400(self, test_client, auth_headers, alice):
        pytest.importorskip("magic")

        response = await test_client.post(
            "/api/posts",
            data={"description": "Totally a picture"},
            files={"image": ("evil.png", b"#!/bin/sh\nrm -rf /tmp/cache\n", "image/png")},
            headers=auth_headers(alice),
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "image"
