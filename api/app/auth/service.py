"""Registration, login and token refresh."""

from fastapi.concurrency import run_in_threadpool

from app.auth.crypto import dummy_verify, hash_password, verify_password
from app.auth.tokens import TokenPair, TokenService
from app.errors import ConflictError, InvalidCredentialsError, NotFoundError
from app.logging_config import logger
from app.models.user import User
from app.timeouts import with_timeout


class AuthService:
    """Session orchestrator over the account repository and token service."""

    def __init__(self, users, tokens: TokenService, timeout: float = 5.0):
        self.users = users
        self.tokens = tokens
        self.timeout = timeout

    async def register(self, email: str, password: str) -> User:
        """Create an account.

        Raises:
            ConflictError: If the email is already registered
        """
        return await with_timeout("register", self._register(email, password), self.timeout)

    async def _register(self, email: str, password: str) -> User:
        try:
            await self.users.get_by_email(email)
        except NotFoundError:
            pass
        else:
            logger.info("Registration rejected, email in use", email=email)
            raise ConflictError("Email already exists")

        # Argon2 hashing blocks; run it off the event loop
        password_hash = await run_in_threadpool(hash_password, password)
        user = await self.users.create(User(email=email, password_hash=password_hash))

        logger.info("User registered", user_id=user.id, email=email)
        return user

    async def login(self, email: str, password: str) -> TokenPair:
        """Check credentials and issue a token pair.

        Raises:
            InvalidCredentialsError: For an unknown email or a wrong password alike
        """
        return await with_timeout("login", self._login(email, password), self.timeout)

    async def _login(self, email: str, password: str) -> TokenPair:
        try:
            user = await self.users.get_by_email(email)
        except NotFoundError:
            await run_in_threadpool(dummy_verify)
            logger.warning("Login failed", email=email)
            raise InvalidCredentialsError()

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.warning("Login failed", email=email)
            raise InvalidCredentialsError()

        logger.info("User logged in", user_id=user.id)
        return self.tokens.issue_pair(user.id, user.email)

    async def refresh_access_token(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new access token.

        Raises:
            InvalidTokenError: If the refresh token does not validate
        """
        access_token = self.tokens.refresh(refresh_token)
        logger.info("Access token refreshed")
        return access_token
