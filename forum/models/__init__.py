from .user import Credentials, PublicUser, StoredUser, User, UserDocument
from .post import (
    Comment,
    CommentBody,
    InteractionKind,
    Interactions,
    Post,
    PostBody,
    PostDocument,
    PostWithAuthor,
    StoredPost,
)
