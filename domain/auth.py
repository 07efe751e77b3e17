"""Stand-in for the authentication service while there is no real backend."""
import asyncio
import logging


logger = logging.getLogger(__name__)


EMAILS = ("banana", "banana@apple.ca")
PASSWORD = "banana"


class InvalidCredentials(Exception):
    pass


class AuthenticationService:
    def __init__(self, *, token: str = "keyboardcat", delay: float = 0.0) -> None:
        self._token = token
        self.delay = delay
        self.token: str | None = None

    @property
    def is_logged_in(self) -> bool:
        return self.token is not None

    async def login(self, email: str, password: str) -> str:
        logger.info("Login attempt for %s", email)
        if email not in EMAILS or password != PASSWORD:
            raise InvalidCredentials("User and password has incorrect combination")

        await asyncio.sleep(self.delay)
        self.token = self._token
        return self.token

    async def register(self, name: str, email: str, password: str) -> None:
        logger.info("Registered %s <%s>", name, email)

    def logout(self) -> None:
        self.token = None
