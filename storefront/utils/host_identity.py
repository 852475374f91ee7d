# storefront/utils/host_identity.py
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qsl

from pydantic import ValidationError

from storefront.schemas.user import HostIdentity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostContext:
    """What the host environment offered: whether it exists at all, and who it says the user is."""

    available: bool
    identity: Optional[HostIdentity] = None


def _signature_ok(pairs: dict, bot_token: str) -> bool:
    received = pairs.get("hash")
    if not received:
        return False
    check_string = "\n".join(f"{k}={v}" for k, v in sorted(pairs.items()) if k != "hash")
    secret = hmac.new(b"WebAppData", bot_token.encode("utf-8"), hashlib.sha256).digest()
    expected = hmac.new(secret, check_string.encode("utf-8"), hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, received)


def parse_init_data(init_data: str, bot_token: Optional[str] = None) -> Optional[HostIdentity]:
    """Extract the user from WebApp init data. Returns None when there is no usable user."""
    pairs = dict(parse_qsl(init_data or "", keep_blank_values=True))

    if bot_token and not _signature_ok(pairs, bot_token):
        logger.warning("Host init data signature mismatch, ignoring identity")
        return None

    raw_user = pairs.get("user")
    if not raw_user:
        return None
    try:
        return HostIdentity.model_validate(json.loads(raw_user))
    except (ValueError, ValidationError) as e:
        logger.warning(f"Host init data carries an unreadable user: {e}")
        return None


def read_host_context(init_data: Optional[str], bot_token: Optional[str] = None) -> HostContext:
    # None means the app is not running inside the host at all
    if init_data is None:
        return HostContext(available=False)
    return HostContext(available=True, identity=parse_init_data(init_data, bot_token))
