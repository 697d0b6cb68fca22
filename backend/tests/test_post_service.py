"""
Notify Backend: Post Service Tests
===================================

What:  Post CRUD, like toggling, comments and pagination against an in-memory
       database.
"""

from uuid import uuid4

import pytest

from app.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.schemas.common import Pagination
from app.services.image_service import UploadedImage
from app.services.post_service import PostService


@pytest.fixture
def png_upload(sample_png_bytes) -> UploadedImage:
    return UploadedImage(filename="photo.png", content_type="image/png", content=sample_png_bytes)


class TestCreatePost:

    @pytest.mark.asyncio
    async def test_create_post(self, db_session, alice, png_upload):
        service = PostService(db_session)

        post = await service.create_post(alice.id, "  Hello world  ", png_upload)

        assert post.description == "Hello world"
        assert post.image.startswith("data:image/png;base64,")
        assert post.author.name == "Alice"
        assert post.likers == []
        assert post.comments == []

    @pytest.mark.asyncio
    async def test_description_required(self, db_session, alice, png_upload):
        with pytest.raises(ValidationError, match="Description is required"):
            await PostService(db_session).create_post(alice.id, "   ", png_upload)

    @pytest.mark.asyncio
    async def test_image_required(self, db_session, alice):
        with pytest.raises(ValidationError, match="Image file is required"):
            await PostService(db_session).create_post(alice.id, "Hello", None)

    @pytest.mark.asyncio
    async def test_invalid_image_rejected(self, db_session, alice):
        upload = UploadedImage(filename="notes.pdf", content_type="application/pdf", content=b"%PDF")
        with pytest.raises(ValidationError):
            await PostService(db_session).create_post(alice.id, "Hello", upload)


class TestUpdateDelete:

    @pytest.mark.asyncio
    async def test_author_can_update_description(self, db_session, alice, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Before", png_upload)
        original_image = post.image

        updated = await service.update_post(post.id, alice.id, description="After")

        assert updated.description == "After"
        assert updated.image == original_image

    @pytest.mark.asyncio
    async def test_non_author_cannot_update(self, db_session, alice, bob, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Mine", png_upload)

        with pytest.raises(ForbiddenError, match="update this post"):
            await service.update_post(post.id, bob.id, description="Stolen")

    @pytest.mark.asyncio
    async def test_update_unknown_post(self, db_session, alice):
        with pytest.raises(NotFoundError, match="Post not found"):
            await PostService(db_session).update_post(uuid4(), alice.id, description="x")

    @pytest.mark.asyncio
    async def test_author_can_delete(self, db_session, alice, bob, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Short-lived", png_upload)
        await service.toggle_like(post.id, bob.id)
        await service.add_comment(post.id, bob.id, "Nice")

        await service.delete_post(post.id, alice.id)

        with pytest.raises(NotFoundError):
            await service.get_post(post.id)

    @pytest.mark.asyncio
    async def test_non_author_cannot_delete(self, db_session, alice, bob, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Mine", png_upload)

        with pytest.raises(ForbiddenError):
            await service.delete_post(post.id, bob.id)


class TestLikes:

    @pytest.mark.asyncio
    async def test_toggle_like_on_and_off(self, db_session, alice, bob, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Like me", png_upload)

        assert await service.toggle_like(post.id, bob.id) == (1, True)
        assert await service.toggle_like(post.id, alice.id) == (2, True)
        assert await service.toggle_like(post.id, bob.id) == (1, False)

        reloaded = await service.get_post(post.id)
        assert [u.id for u in reloaded.likers] == [alice.id]

    @pytest.mark.asyncio
    async def test_like_unknown_post(self, db_session, bob):
        with pytest.raises(NotFoundError):
            await PostService(db_session).toggle_like(uuid4(), bob.id)


class TestComments:

    @pytest.mark.asyncio
    async def test_add_comment(self, db_session, alice, bob, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Talk to me", png_upload)

        comment = await service.add_comment(post.id, bob.id, " Hi! ")

        assert comment.text == "Hi!"
        assert comment.author.name == "Bob"
        reloaded = await service.get_post(post.id)
        assert [c.id for c in reloaded.comments] == [comment.id]

    @pytest.mark.asyncio
    async def test_blank_comment_rejected(self, db_session, alice, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Talk to me", png_upload)

        with pytest.raises(ValidationError, match="Comment text is required"):
            await service.add_comment(post.id, alice.id, "  ")

    @pytest.mark.asyncio
    async def test_comment_on_unknown_post(self, db_session, alice):
        with pytest.raises(NotFoundError):
            await PostService(db_session).add_comment(uuid4(), alice.id, "Hello?")

    @pytest.mark.asyncio
    async def test_comment_author_can_delete(self, db_session, alice, bob, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Post", png_upload)
        comment = await service.add_comment(post.id, bob.id, "Oops")

        await service.delete_comment(post.id, comment.id, bob.id)

        assert (await service.get_post(post.id)).comments == []

    @pytest.mark.asyncio
    async def test_post_owner_can_delete_any_comment(self, db_session, alice, bob, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Post", png_upload)
        comment = await service.add_comment(post.id, bob.id, "Spam")

        await service.delete_comment(post.id, comment.id, alice.id)

        assert (await service.get_post(post.id)).comments == []

    @pytest.mark.asyncio
    async def test_third_party_cannot_delete_comment(self, db_session, alice, bob, carol, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Post", png_upload)
        comment = await service.add_comment(post.id, bob.id, "Mine")

        with pytest.raises(ForbiddenError, match="delete this comment"):
            await service.delete_comment(post.id, comment.id, carol.id)

    @pytest.mark.asyncio
    async def test_delete_unknown_comment(self, db_session, alice, png_upload):
        service = PostService(db_session)
        post = await service.create_post(alice.id, "Post", png_upload)

        with pytest.raises(NotFoundError, match="Comment not found"):
            await service.delete_comment(post.id, uuid4(), alice.id)


class TestPagination:

    @pytest.mark.asyncio
    async def test_list_posts_pages(self, db_session, alice, bob, png_upload):
        service = PostService(db_session)
        for i in range(3):
            await service.create_post(alice.id, f"Alice {i}", png_upload)
        await service.create_post(bob.id, "Bob 0", png_upload)

        first_page, total = await service.list_posts(page=1, limit=3)
        second_page, _ = await service.list_posts(page=2, limit=3)

        assert total == 4
        assert len(first_page) == 3
        assert len(second_page) == 1
        assert {p.id for p in first_page}.isdisjoint({p.id for p in second_page})

    @pytest.mark.asyncio
    async def test_list_posts_for_one_user(self, db_session, alice, bob, png_upload):
        service = PostService(db_session)
        await service.create_post(alice.id, "Alice 0", png_upload)
        await service.create_post(bob.id, "Bob 0", png_upload)

        posts, total = await service.list_posts(page=1, limit=10, user_id=bob.id)

        assert total == 1
        assert [p.description for p in posts] == ["Bob 0"]

    def test_pagination_block(self):
        assert Pagination.build(page=1, limit=10, total=25).model_dump(by_alias=True) == {
            "currentPage": 1,
            "totalPages": 3,
            "total": 25,
            "hasMore": True,
        }
        last = Pagination.build(page=3, limit=10, total=25)
        assert last.has_more is False
        empty = Pagination.build(page=1, limit=10, total=0)
        assert (empty.total_pages, empty.has_more) == (0, False)
