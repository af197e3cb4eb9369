import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import PlainTextResponse

from ..dependencies import get_credential_service
from ..errors import CredentialConflict, CredentialInvalid
from ..models import LoginRequest, SignupRequest
from ..services.identity import CredentialService

router = APIRouter(tags=["auth"])

logger = logging.getLogger(__name__)


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_class=Response)
async def signup(
    payload: SignupRequest,
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
) -> Response:
    if not await credentials.register_credential(payload):
        raise CredentialConflict("User already exists")
    return Response(status_code=status.HTTP_201_CREATED)


@router.post("/login", response_class=PlainTextResponse)
async def login(
    payload: LoginRequest,
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
) -> PlainTextResponse:
    """Return a bearer token for valid credentials."""
    if not await credentials.check_credential(payload.username, payload.password):
        logger.info("Rejected login for %s", payload.username)
        raise CredentialInvalid("User doesn't exist or wrong password")
    return PlainTextResponse(credentials.issue_token(payload.username))
