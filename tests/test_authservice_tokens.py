import time

import jwt
import pytest

from components.authservice import AuthConfig, TokenService
from components.authservice.contracts import User
from components.authservice.errors import InvalidToken


class FixedClock:
    def __init__(self, ts: int):
        self.ts = ts

    def now_utc_ts(self) -> int:
        return self.ts


def make_cfg(**overrides) -> AuthConfig:
    params = dict(access_secret="access-secret-0123456789abcdef-xyz", refresh_secret="refresh-secret-0123456789abcdef-xyz")
    params.update(overrides)
    return AuthConfig(**params)


def make_user(version: int = 0) -> User:
    return User(id="u-1", email="a@b.com", username="bob", token_version=version)


def test_access_round_trip_and_wire_shape():
    svc = TokenService(make_cfg())
    token = svc.issue_access(make_user())
    assert svc.verify_access(token).user_id == "u-1"

    payload = jwt.decode(token, options={"verify_signature": False})
    assert set(payload) == {"userId", "exp"}


def test_default_lifetimes_are_fifteen_minutes_and_seven_days():
    cfg = make_cfg()
    assert cfg.access_ttl_seconds == 900
    assert cfg.refresh_ttl_seconds == 604800

    now = int(time.time())
    svc = TokenService(cfg, clock=FixedClock(now))
    user = make_user()
    assert svc.verify_access(svc.issue_access(user)).exp == now + 900
    assert svc.verify_refresh(svc.issue_refresh(user)).exp == now + 604800


def test_refresh_round_trip_carries_token_version():
    svc = TokenService(make_cfg())
    token = svc.issue_refresh(make_user(version=3))
    claims = svc.verify_refresh(token)
    assert claims.user_id == "u-1"
    assert claims.token_version == 3

    payload = jwt.decode(token, options={"verify_signature": False})
    assert set(payload) == {"userId", "tokenVersion", "exp"}


def test_token_classes_are_not_interchangeable():
    svc = TokenService(make_cfg())
    user = make_user()
    with pytest.raises(InvalidToken):
        svc.verify_refresh(svc.issue_access(user))
    with pytest.raises(InvalidToken):
        svc.verify_access(svc.issue_refresh(user))


def test_expired_tokens_are_rejected():
    issued_long_ago = FixedClock(int(time.time()) - 8 * 24 * 3600)
    svc = TokenService(make_cfg(), clock=issued_long_ago)
    user = make_user()
    access = svc.issue_access(user)
    refresh = svc.issue_refresh(user)

    with pytest.raises(InvalidToken):
        svc.verify_access(access)
    with pytest.raises(InvalidToken):
        svc.verify_refresh(refresh)


def test_rotating_secret_invalidates_outstanding_tokens():
    old = TokenService(make_cfg())
    token = old.issue_access(make_user())
    new = TokenService(make_cfg(access_secret="rotated-access-secret-0123456789abcdef"))
    with pytest.raises(InvalidToken):
        new.verify_access(token)


def test_tampered_and_malformed_tokens_are_rejected():
    svc = TokenService(make_cfg())
    token = svc.issue_access(make_user())
    other = svc.issue_access(User(id="u-2", email="c@d.com", username="carol"))
    header, _, sig = token.split(".")
    tampered = ".".join([header, other.split(".")[1], sig])

    for bad in (tampered, "garbage", "a.b.c", ""):
        with pytest.raises(InvalidToken):
            svc.verify_access(bad)


def test_missing_claims_are_rejected():
    cfg = make_cfg()
    svc = TokenService(cfg)
    exp = int(time.time()) + 60
    no_user = jwt.encode({"exp": exp}, cfg.refresh_secret, algorithm="HS256")
    no_version = jwt.encode({"userId": "u-1", "exp": exp}, cfg.refresh_secret, algorithm="HS256")
    no_exp = jwt.encode({"userId": "u-1"}, cfg.access_secret, algorithm="HS256")

    with pytest.raises(InvalidToken):
        svc.verify_refresh(no_user)
    with pytest.raises(InvalidToken):
        svc.verify_refresh(no_version)
    with pytest.raises(InvalidToken):
        svc.verify_access(no_exp)


def test_config_requires_distinct_non_empty_secrets():
    with pytest.raises(ValueError):
        AuthConfig(access_secret="", refresh_secret="x")
    with pytest.raises(ValueError):
        AuthConfig(access_secret="same", refresh_secret="same")
    assert AuthConfig(access_secret="a", refresh_secret="b", environment="prod").is_production
