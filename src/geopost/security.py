from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .dependencies import get_credential_service
from .errors import CredentialInvalid
from .models import IdentityClaims
from .services.identity import CredentialService

bearer_scheme = HTTPBearer(auto_error=False)


async def verify_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    credential_service: Annotated[CredentialService, Depends(get_credential_service)],
) -> IdentityClaims:
    if credentials is None or not credentials.credentials:
        raise CredentialInvalid("Invalid or missing bearer token")
    return credential_service.decode_token(credentials.credentials)


CurrentUser = Annotated[IdentityClaims, Depends(verify_token)]
