from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from forum.api.deps import (
    Actor,
    get_blob_store,
    get_content,
    get_current_actor,
    get_feed,
    get_interactions,
    require_actor,
)
from forum.api.schemas import (
    CommentIn,
    CommentOut,
    ForwardOut,
    LikeOut,
    PostDetailOut,
    PostEditOut,
    PostOut,
    ok,
)
from forum.services.blobs import BlobStore
from forum.services.content import ContentService
from forum.services.feed import FeedService
from forum.services.interactions import InteractionService

router = APIRouter(prefix="/posts", tags=["posts"])


async def _read_upload(upload: Optional[UploadFile], blobs: BlobStore) -> Optional[bytes]:
    if upload is None or not upload.filename:
        return None
    # one byte past the limit is enough to reject oversize uploads
    return await upload.read(blobs.max_bytes + 1)


@router.get("")
async def list_posts(q: Optional[str] = None, feed: FeedService = Depends(get_feed)):
    posts = await feed.search_posts(q) if q else await feed.list_posts()
    return ok([PostOut.of(p) for p in posts])


@router.post("")
async def create_post(
    title: str = Form(""),
    content: str = Form(""),
    image: Optional[UploadFile] = File(None),
    actor: Actor = Depends(require_actor),
    content_service: ContentService = Depends(get_content),
    blobs: BlobStore = Depends(get_blob_store),
):
    data = await _read_upload(image, blobs)
    post = await content_service.create_post(actor.id, title, content, data)
    return ok(PostEditOut.of(post))


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    actor: Optional[Actor] = Depends(get_current_actor),
    feed: FeedService = Depends(get_feed),
):
    detail = await feed.post_detail(post_id, actor.id if actor else None)
    return ok(
        PostDetailOut(
            post=PostOut.of(detail.post),
            comments=[CommentOut.of(c) for c in detail.comments],
            liked=detail.liked,
            forwarded=detail.forwarded,
        )
    )


@router.patch("/{post_id}")
async def update_post(
    post_id: str,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    images: Optional[List[str]] = Form(None),
    image: Optional[UploadFile] = File(None),
    actor: Actor = Depends(require_actor),
    content_service: ContentService = Depends(get_content),
    blobs: BlobStore = Depends(get_blob_store),
):
    data = await _read_upload(image, blobs)
    post = await content_service.update_post(post_id, actor.id, title=title, content=content, images=images, image=data)
    return ok(PostEditOut.of(post))


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    actor: Actor = Depends(require_actor),
    content_service: ContentService = Depends(get_content),
):
    await content_service.delete_post(post_id, actor.id)
    return ok({"id": post_id})


@router.post("/{post_id}/like")
async def toggle_like(
    post_id: str,
    actor: Actor = Depends(require_actor),
    interactions: InteractionService = Depends(get_interactions),
):
    state = await interactions.toggle_like(post_id, actor.id)
    return ok(LikeOut(count=state.count, liked=state.active))


@router.post("/{post_id}/forward")
async def toggle_forward(
    post_id: str,
    actor: Actor = Depends(require_actor),
    interactions: InteractionService = Depends(get_interactions),
):
    state = await interactions.toggle_forward(post_id, actor.id)
    return ok(ForwardOut(count=state.count, forwarded=state.active))


@router.post("/{post_id}/comments")
async def add_comment(
    post_id: str,
    data: CommentIn,
    actor: Actor = Depends(require_actor),
    interactions: InteractionService = Depends(get_interactions),
):
    comments = await interactions.add_comment(post_id, actor.id, data.content)
    views = await interactions.comment_views(comments)
    return ok([CommentOut.of(c) for c in views])
