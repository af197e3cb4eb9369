"""Credential checks, signup and bearer tokens.

Passwords are stored as salted PBKDF2-SHA256 hashes in the user index,
keyed by username.  Tokens are HS256 JWTs carrying ``username`` and ``exp``.
"""

import hashlib
import hmac
import logging
import re
import secrets
from datetime import datetime, timedelta, timezone

import jwt

from ..errors import CredentialInvalid, InputInvalid
from ..lib.elasticsearch import SearchIndex
from ..lib.predicates import TermEquals
from ..models import IdentityClaims, SignupRequest, User

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[a-z0-9]+$")

HASH_ALGORITHM = "pbkdf2_sha256"
HASH_ITERATIONS = 260_000
TOKEN_ALGORITHM = "HS256"


def hash_password(password: str, salt: str | None = None, iterations: int = HASH_ITERATIONS) -> str:
    """Return ``algorithm$iterations$salt$digest`` for *password*."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return f"{HASH_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        algorithm, iterations, salt, expected = stored.split("$")
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != HASH_ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), rounds)
    return hmac.compare_digest(digest.hex(), expected)


class CredentialService:
    def __init__(
        self,
        index: SearchIndex,
        signing_key: str,
        user_index: str = "user",
        token_ttl_hours: int = 24,
    ):
        self.index = index
        self.signing_key = signing_key
        self.user_index = user_index
        self.token_ttl = timedelta(hours=token_ttl_hours)

    async def check_credential(self, username: str, password: str) -> bool:
        """True when a stored user has *username* and its hash verifies *password*."""
        users = await self.index.query(
            self.user_index, TermEquals(field="username", value=username), User
        )
        for user in users:
            if user.username == username and verify_password(password, user.password):
                return True
        return False

    async def register_credential(self, request: SignupRequest) -> bool:
        """Create the user; returns ``False`` without writing if the name is taken.

        Raises ``InputInvalid`` for an empty password or a username that is
        not one or more lowercase letters and digits.
        """
        if not request.password or not USERNAME_PATTERN.match(request.username):
            raise InputInvalid("Invalid username or password")

        existing = await self.index.count(
            self.user_index, TermEquals(field="username", value=request.username)
        )
        if existing > 0:
            logger.info("User already exists: %s", request.username)
            return False

        user = User(
            username=request.username,
            password=hash_password(request.password),
            age=request.age,
            gender=request.gender,
        )
        if not await self.index.create(self.user_index, user.username, user):
            logger.info("User already exists: %s", user.username)
            return False
        logger.info("User added: %s", user.username)
        return True

    def issue_token(self, username: str, now: datetime | None = None) -> str:
        issued = now or datetime.now(timezone.utc)
        claims = {"username": username, "exp": issued + self.token_ttl}
        return jwt.encode(claims, self.signing_key, algorithm=TOKEN_ALGORITHM)

    def decode_token(self, token: str) -> IdentityClaims:
        """Verify *token* and return its claims, or raise ``CredentialInvalid``."""
        try:
            payload = jwt.decode(
                token,
                self.signing_key,
                algorithms=[TOKEN_ALGORITHM],
                options={"require": ["exp", "username"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise CredentialInvalid("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise CredentialInvalid("Invalid token") from exc

        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise CredentialInvalid("Invalid token")
        return IdentityClaims(
            username=username,
            expiry=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
