from __future__ import annotations

from fastapi import APIRouter, Depends

from forum.api.deps import Actor, get_feed, get_identity, require_actor
from forum.api.schemas import AccountOut, PostOut, UsernameIn, ok
from forum.services.feed import FeedService
from forum.services.profile import IdentityService

router = APIRouter(prefix="/me", tags=["profile"])


@router.patch("/username")
async def update_username(
    data: UsernameIn,
    actor: Actor = Depends(require_actor),
    identity: IdentityService = Depends(get_identity),
):
    user = await identity.update_username(actor.id, data.username)
    return ok(AccountOut.of(user))


@router.get("/posts")
async def my_posts(actor: Actor = Depends(require_actor), feed: FeedService = Depends(get_feed)):
    posts = await feed.list_posts_by_author(actor.id)
    return ok([PostOut.of(p) for p in posts])
