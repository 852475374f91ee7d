import hashlib
import hmac
import json
from urllib.parse import urlencode

from storefront.utils.host_identity import parse_init_data, read_host_context

BOT_TOKEN = "123456:TEST-TOKEN"


def _signed(fields: dict, bot_token: str = BOT_TOKEN) -> str:
    check_string = "\n".join(f"{k}={v}" for k, v in sorted(fields.items()))
    secret = hmac.new(b"WebAppData", bot_token.encode(), hashlib.sha256).digest()
    signature = hmac.new(secret, check_string.encode(), hashlib.sha256).hexdigest()
    return urlencode({**fields, "hash": signature})


def _fields(**user) -> dict:
    return {"auth_date": "1700000000", "query_id": "AAE", "user": json.dumps(user)}


def test_parse_init_data_reads_user():
    identity = parse_init_data(urlencode(_fields(id=7, username="alice", first_name="Alice")))

    assert identity.id == 7
    assert identity.username == "alice"
    assert identity.first_name == "Alice"


def test_parse_init_data_without_user():
    assert parse_init_data("auth_date=1700000000") is None
    assert parse_init_data("") is None


def test_parse_init_data_with_unreadable_user():
    assert parse_init_data(urlencode({"user": "{not json"})) is None
    assert parse_init_data(urlencode({"user": json.dumps({"username": "no id"})})) is None


def test_signed_init_data_is_accepted():
    identity = parse_init_data(_signed(_fields(id=7, username="alice")), bot_token=BOT_TOKEN)

    assert identity.id == 7


def test_tampered_init_data_is_rejected():
    signed = _signed(_fields(id=7, username="alice"))
    tampered = signed.replace("alice", "admin")

    assert parse_init_data(tampered, bot_token=BOT_TOKEN) is None
    assert parse_init_data(urlencode(_fields(id=7)), bot_token=BOT_TOKEN) is None


def test_read_host_context():
    absent = read_host_context(None)
    bare = read_host_context("")
    present = read_host_context(urlencode(_fields(id=9)))

    assert absent.available is False and absent.identity is None
    assert bare.available is True and bare.identity is None
    assert present.available is True and present.identity.id == 9
