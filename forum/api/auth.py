from __future__ import annotations

from fastapi import APIRouter, Depends

from forum.api.deps import Actor, get_identity, get_registration, require_actor
from forum.api.schemas import AccountOut, LoginIn, SignupIn, TokenOut, VerifyIn, ok
from forum.core.errors import Unauthorized
from forum.services.auth import create_access_token
from forum.services.profile import IdentityService
from forum.services.registration import RegistrationService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup")
async def signup(data: SignupIn, registration: RegistrationService = Depends(get_registration)):
    # the token only travels by email
    await registration.signup(data.username, data.email, data.password)
    return ok({"message": "Check your email to verify your account"})


@router.post("/verify")
async def verify(data: VerifyIn, registration: RegistrationService = Depends(get_registration)):
    user = await registration.verify(data.token)
    return ok(AccountOut.of(user))


@router.get("/verify")
async def verify_link(token: str = "", registration: RegistrationService = Depends(get_registration)):
    user = await registration.verify(token)
    return ok(AccountOut.of(user))


@router.post("/login")
async def login(data: LoginIn, identity: IdentityService = Depends(get_identity)):
    user = await identity.authenticate(data.username, data.password)
    if user is None:
        raise Unauthorized("Invalid credentials")
    return ok(TokenOut(access_token=create_access_token(user.id, user.is_admin)))


@router.get("/me")
async def me(actor: Actor = Depends(require_actor), identity: IdentityService = Depends(get_identity)):
    user = await identity.current_user(actor.id)
    return ok(AccountOut.of(user))
