from __future__ import annotations

import asyncio

import pytest
from bson import ObjectId

from forum.core.errors import InvalidAuthor, InvalidInput, NotFound
from forum.models.common import utcnow
from forum.models.post import InteractionKind
from forum.services.interactions import UNKNOWN_AUTHOR


class TestToggle:
    async def test_like_then_unlike(self, interactions, alice_post, bob):
        first = await interactions.toggle_like(alice_post.id, bob.id)
        second = await interactions.toggle_like(alice_post.id, bob.id)

        assert (first.count, first.active) == (1, True)
        assert (second.count, second.active) == (0, False)

    async def test_toggle_pair_restores_membership(self, interactions, posts_repo, alice_post, alice, bob):
        await interactions.toggle_like(alice_post.id, alice.id)
        before = await posts_repo.find_by_id(alice_post.id)

        await interactions.toggle_like(alice_post.id, bob.id)
        await interactions.toggle_like(alice_post.id, bob.id)
        after = await posts_repo.find_by_id(alice_post.id)

        assert after.interactions.likes == before.interactions.likes == [alice.id]

    async def test_forward_is_independent_of_like(self, interactions, posts_repo, alice_post, bob):
        await interactions.toggle_like(alice_post.id, bob.id)
        state = await interactions.toggle_forward(alice_post.id, bob.id)

        post = await posts_repo.find_by_id(alice_post.id)
        assert (state.count, state.active) == (1, True)
        assert post.interactions.likes == [bob.id]
        assert post.interactions.forwards == [bob.id]

    async def test_toggle_stamps_updated_at(self, interactions, db, alice_post, bob):
        before = await db["posts"].find_one({"_id": ObjectId(alice_post.id)})

        await interactions.toggle_forward(alice_post.id, bob.id)
        after = await db["posts"].find_one({"_id": ObjectId(alice_post.id)})

        assert after["updatedAt"] >= before["updatedAt"]
        assert after["createdAt"] == before["createdAt"]

    async def test_concurrent_toggles_by_different_users_keep_both(
        self, interactions, posts_repo, alice_post, alice, bob
    ):
        await asyncio.gather(
            interactions.toggle_like(alice_post.id, alice.id),
            interactions.toggle_like(alice_post.id, bob.id),
        )

        post = await posts_repo.find_by_id(alice_post.id)
        assert sorted(post.interactions.likes) == sorted([alice.id, bob.id])

    async def test_racing_toggles_by_same_user_never_duplicate(self, interactions, posts_repo, alice_post, bob):
        results = await asyncio.gather(
            interactions.toggle_like(alice_post.id, bob.id),
            interactions.toggle_like(alice_post.id, bob.id),
        )

        post = await posts_repo.find_by_id(alice_post.id)
        assert sorted(r.active for r in results) == [False, True]
        assert post.interactions.likes == []

    async def test_unknown_post_is_not_found(self, interactions, bob):
        with pytest.raises(NotFound):
            await interactions.toggle_like(str(ObjectId()), bob.id)
        with pytest.raises(NotFound):
            await interactions.toggle_like("P1", bob.id)

    async def test_repository_returns_none_for_missing_post(self, posts_repo, bob):
        assert await posts_repo.toggle_interaction(str(ObjectId()), bob.id, InteractionKind.LIKE) is None

    async def test_deleted_user_cannot_toggle(self, interactions, users_repo, alice_post, bob):
        await users_repo.delete(bob.id)

        with pytest.raises(InvalidAuthor):
            await interactions.toggle_like(alice_post.id, bob.id)


class TestComments:
    async def test_append_keeps_order(self, interactions, alice_post, alice, bob):
        await interactions.add_comment(alice_post.id, bob.id, "first")
        await interactions.add_comment(alice_post.id, alice.id, "  second  ")
        comments = await interactions.add_comment(alice_post.id, bob.id, "third")

        assert [c.body.content for c in comments] == ["first", "second", "third"]
        assert [c.author for c in comments] == [bob.id, alice.id, bob.id]
        assert all(c.created_at is not None for c in comments)

    async def test_append_adds_exactly_one(self, interactions, posts_repo, alice_post, bob):
        await interactions.add_comment(alice_post.id, bob.id, "same")
        comments = await interactions.add_comment(alice_post.id, bob.id, "same")

        assert len(comments) == 2

    async def test_comment_does_not_touch_likes(self, interactions, posts_repo, alice_post, bob):
        await interactions.toggle_like(alice_post.id, bob.id)
        await interactions.add_comment(alice_post.id, bob.id, "hi")

        post = await posts_repo.find_by_id(alice_post.id)
        assert post.interactions.likes == [bob.id]

    async def test_unknown_author_is_rejected(self, interactions, alice_post):
        with pytest.raises(InvalidAuthor):
            await interactions.add_comment(alice_post.id, str(ObjectId()), "hi")

    async def test_empty_comment_is_rejected(self, interactions, alice_post, bob):
        with pytest.raises(InvalidInput):
            await interactions.add_comment(alice_post.id, bob.id, "   ")

    async def test_missing_post(self, interactions, bob):
        with pytest.raises(NotFound):
            await interactions.add_comment(str(ObjectId()), bob.id, "hi")

    async def test_comment_views_render_unknown_for_deleted_authors(
        self, interactions, users_repo, alice_post, alice, bob
    ):
        await interactions.add_comment(alice_post.id, alice.id, "from alice")
        comments = await interactions.add_comment(alice_post.id, bob.id, "from bob")
        await users_repo.delete(bob.id)

        views = await interactions.comment_views(comments)

        assert [v.author_name for v in views] == ["alice", UNKNOWN_AUTHOR]

    async def test_rename_is_reflected_in_comment_views(self, interactions, users_repo, alice_post, bob):
        comments = await interactions.add_comment(alice_post.id, bob.id, "hello")
        await users_repo.update_name(bob.id, "robert")

        views = await interactions.comment_views(comments)

        assert views[0].author_name == "robert"


class TestOldSchemaPosts:
    @pytest.fixture
    async def legacy_post_id(self, db, alice):
        now = utcnow()
        result = await db["posts"].insert_one(
            {
                "author": alice.id,
                "title": "legacy",
                "body": {"content": "embedded likes"},
                "interactions": {"likes": [{"name": "snap"}], "forwards": [], "comments": []},
                "createdAt": now,
                "updatedAt": now,
            }
        )
        return str(result.inserted_id)

    @pytest.mark.parametrize("kind", list(InteractionKind))
    async def test_toggle_leaves_document_untouched(self, interactions, db, legacy_post_id, bob, kind):
        before = await db["posts"].find_one({"_id": ObjectId(legacy_post_id)})

        with pytest.raises(NotFound):
            await interactions.toggle(legacy_post_id, bob.id, kind)
        with pytest.raises(NotFound):
            await interactions.toggle(legacy_post_id, bob.id, kind)

        assert await db["posts"].find_one({"_id": ObjectId(legacy_post_id)}) == before

    async def test_comment_leaves_document_untouched(self, interactions, db, legacy_post_id, bob):
        before = await db["posts"].find_one({"_id": ObjectId(legacy_post_id)})

        with pytest.raises(NotFound):
            await interactions.add_comment(legacy_post_id, bob.id, "hi")

        after = await db["posts"].find_one({"_id": ObjectId(legacy_post_id)})
        assert after == before
        assert after["interactions"]["comments"] == []
