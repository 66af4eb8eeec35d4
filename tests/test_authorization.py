from datetime import timedelta

import pytest

from app.core.authorization import Decision, PermissionChecker, authorize
from app.core.constants import PermissionKey
from app.core.exceptions import Forbidden, Unauthorized
from app.core.security import TokenClaims, create_access_token, decode_access_token


def claims_with(*permissions):
    return TokenClaims(user_id=1, username="alice", roles=["CUSTOM"], permissions=list(permissions))


def test_authorize_allows_when_every_key_is_granted():
    assert authorize({"tickets.read"}, {"tickets.read", "tickets.create"}) is Decision.ALLOW
    assert (
        authorize(["tickets.read", "tickets.create"], ["tickets.create", "tickets.read"])
        is Decision.ALLOW
    )


def test_authorize_denies_when_any_key_is_missing():
    assert authorize({"tickets.read", "tickets.update"}, {"tickets.read"}) is Decision.DENY
    assert authorize({"roles.manage"}, set()) is Decision.DENY


def test_authorize_ignores_role_names():
    # Only permission keys count, a role called ADMIN grants nothing by itself.
    assert authorize({"ADMIN"}, {"roles.manage"}) is Decision.DENY


def test_empty_requirement_allows():
    assert authorize(set(), set()) is Decision.ALLOW


def test_permission_checker_accepts_enum_keys():
    checker = PermissionChecker([PermissionKey.TICKETS_UPDATE])
    claims = claims_with("tickets.update")
    assert checker(claims) is claims


def test_permission_checker_raises_forbidden():
    checker = PermissionChecker(["tickets.update"])
    with pytest.raises(Forbidden) as exc:
        checker(claims_with("tickets.read"))
    assert exc.value.status_code == 403
    assert exc.value.message == "Insufficient permissions"


def test_token_round_trip_keeps_claims():
    claims = TokenClaims(
        user_id=7, username="noc", roles=["AGENT_NOC"], permissions=["tickets.read", "tickets.update"]
    )
    decoded = decode_access_token(create_access_token(claims))
    assert decoded == claims


def test_expired_token_is_rejected():
    token = create_access_token(claims_with(), expires_delta=timedelta(seconds=-5))
    with pytest.raises(Unauthorized) as exc:
        decode_access_token(token)
    assert exc.value.status_code == 401


def test_tampered_token_is_rejected():
    token = create_access_token(claims_with("tickets.read"))
    header, payload, signature = token.split(".")
    forged = ".".join([header, payload, signature[::-1]])
    with pytest.raises(Unauthorized):
        decode_access_token(forged)


def test_garbage_token_is_rejected():
    with pytest.raises(Unauthorized):
        decode_access_token("not-a-jwt")
