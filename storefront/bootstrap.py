# storefront/bootstrap.py
import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from storefront.config import settings
from storefront.schemas.user import HostIdentity, User
from storefront.store import Store
from storefront.utils import normalizer
from storefront.utils.gateway import AuthorityGateway
from storefront.utils.host_identity import HostContext, read_host_context

logger = logging.getLogger(__name__)

GUEST_ID = 0
GUEST_USERNAME = "guest_user"
DEV_ID = 999
DEV_USERNAME = "dev_user"


class BootstrapKind(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    GUEST = "guest"
    DEVELOPMENT = "development"


@dataclass(frozen=True)
class BootstrapOutcome:
    kind: BootstrapKind
    user: User
    error: Optional[str] = None


def referral_link(bot_username: str, start: str) -> str:
    return f"https://t.me/{bot_username}?start={start}"


def guest_user(bot_username: str) -> User:
    return User(
        id=GUEST_ID,
        username=GUEST_USERNAME,
        referral_link=referral_link(bot_username, "guest"),
    )


def development_user(bot_username: str) -> User:
    return User(
        id=DEV_ID,
        username=DEV_USERNAME,
        referral_link=referral_link(bot_username, "dev"),
    )


class BootstrapSequencer:
    """
    One-shot startup: establish the identity, then load catalog and orders.

    Every failure on the authenticated path ends in the guest fallback; run()
    itself never raises, and the store leaves its loading phase on every path.
    """

    def __init__(
        self,
        store: Store,
        host: HostContext,
        admin_username: Optional[str] = None,
        bot_username: Optional[str] = None,
        production: Optional[bool] = None,
    ):
        self.store = store
        self.host = host
        self.admin_username = admin_username or settings.ADMIN_USERNAME
        self.bot_username = bot_username or settings.BOT_USERNAME
        self.production = settings.is_production if production is None else production
        self._outcome: Optional[BootstrapOutcome] = None
        self._lock = asyncio.Lock()

    @property
    def outcome(self) -> Optional[BootstrapOutcome]:
        return self._outcome

    async def run(self) -> BootstrapOutcome:
        async with self._lock:
            if self._outcome is not None:
                return self._outcome
            try:
                self._outcome = await self._resolve()
            finally:
                self.store.finish_loading()
            logger.info(f"Bootstrap finished as {self._outcome.kind.value} (user id {self._outcome.user.id})")
            return self._outcome

    async def _resolve(self) -> BootstrapOutcome:
        if self.host.identity is not None:
            return await self._authenticate(self.host.identity)

        if self.host.available or self.production:
            logger.info("No host identity available, continuing as guest")
            user = guest_user(self.bot_username)
            self.store.set_user(user)
            return BootstrapOutcome(BootstrapKind.GUEST, user)

        logger.warning("Host environment not found, using dev mode")
        user = development_user(self.bot_username)
        self.store.set_user(user)
        return BootstrapOutcome(BootstrapKind.DEVELOPMENT, user)

    async def _authenticate(self, identity: HostIdentity) -> BootstrapOutcome:
        is_admin = identity.username == self.admin_username
        username = identity.username or f"User_{identity.id}"

        try:
            data = await self.store.gateway.get_or_create_user(identity.id, username, is_admin)
            user = normalizer.decode_user(data, referral_link(self.bot_username, str(identity.id)))
            self.store.set_user(user)

            await self.store.load_products()
            await self.store.load_orders()
        except Exception as e:
            logger.error(f"Failed to initialize app: {e}")
            user = guest_user(self.bot_username)
            self.store.reset_to_guest(user)
            return BootstrapOutcome(BootstrapKind.GUEST, user, error=str(e))

        return BootstrapOutcome(BootstrapKind.AUTHENTICATED, user)


async def start_store(
    gateway: Optional[AuthorityGateway] = None,
    init_data: Optional[str] = None,
) -> Tuple[Store, BootstrapOutcome]:
    # Build a store from configuration and run the startup sequence once
    store = Store(gateway or AuthorityGateway())
    host = read_host_context(
        init_data if init_data is not None else settings.TELEGRAM_INIT_DATA,
        settings.TELEGRAM_BOT_TOKEN,
    )
    outcome = await BootstrapSequencer(store, host).run()
    return store, outcome
