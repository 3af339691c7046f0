"""Token issuer / verifier tests.

Learn: issuer and verifier take their secret and clock as constructor
arguments, so every test here controls both. Each failure mode is asserted
on its exception class, never on log output.
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from maitre.auth.errors import (
    AccountDeactivated,
    AuthErrorKind,
    InvalidSignature,
    MalformedToken,
    TokenExpired,
    UnknownSubject,
)
from maitre.auth.jwt import TokenConfig, TokenIssuer, TokenVerifier

T0 = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)
CONFIG = TokenConfig(secret="unit-test-secret")


def at(moment: datetime):
    return lambda: moment


# ═══════════════════════════════════════════════════════════
# Issuing
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_issued_claims(seed):
    token = TokenIssuer(CONFIG, clock=at(T0)).issue(seed.admin)
    claims = jwt.decode(token, CONFIG.secret, algorithms=["HS256"], options={"verify_exp": False})

    assert claims["userId"] == str(seed.admin.id)
    assert claims["email"] == "owner@bistro.test"
    assert claims["restaurantId"] == str(seed.bistro.id)
    assert claims["iat"] == int(T0.timestamp())
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


@pytest.mark.asyncio
async def test_token_has_three_parts(seed):
    token = TokenIssuer(CONFIG).issue(seed.staff)
    assert len(token.split(".")) == 3


@pytest.mark.asyncio
async def test_tokens_never_repeat(seed):
    """Two tokens for the same user — even in the same second — differ."""
    issuer = TokenIssuer(CONFIG, clock=at(T0))
    assert issuer.issue(seed.staff) != issuer.issue(seed.staff)


# ═══════════════════════════════════════════════════════════
# Verifying
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_verify_resolves_user(seed, repository):
    token = TokenIssuer(CONFIG, clock=at(T0)).issue(seed.admin)
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0 + timedelta(hours=1)))

    auth = await verifier.verify(token)
    assert auth.user.id == seed.admin.id
    assert auth.restaurant.id == seed.bistro.id


@pytest.mark.asyncio
async def test_verify_is_idempotent(seed, repository):
    token = TokenIssuer(CONFIG, clock=at(T0)).issue(seed.staff)
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0 + timedelta(days=1)))

    first = await verifier.verify(token)
    second = await verifier.verify(token)
    assert first.user.id == second.user.id == seed.staff.id
    assert first.restaurant.id == second.restaurant.id


@pytest.mark.asyncio
async def test_expired_token(seed, repository):
    token = TokenIssuer(CONFIG, clock=at(T0)).issue(seed.admin)
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0 + timedelta(days=8)))

    with pytest.raises(TokenExpired) as exc:
        await verifier.verify(token)
    assert exc.value.kind is AuthErrorKind.TOKEN_EXPIRED


@pytest.mark.asyncio
async def test_expiry_boundary_is_exclusive(seed, repository):
    """At exactly exp the token is already dead; one second before it lives."""
    token = TokenIssuer(CONFIG, clock=at(T0)).issue(seed.admin)
    exp = T0 + CONFIG.lifetime

    alive = TokenVerifier(CONFIG, repository, clock=at(exp - timedelta(seconds=1)))
    assert (await alive.verify(token)).user.id == seed.admin.id

    dead = TokenVerifier(CONFIG, repository, clock=at(exp))
    with pytest.raises(TokenExpired):
        await dead.verify(token)


@pytest.mark.asyncio
async def test_foreign_secret(seed, repository):
    token = TokenIssuer(TokenConfig(secret="someone-elses-secret"), clock=at(T0)).issue(seed.admin)
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0))

    with pytest.raises(InvalidSignature):
        await verifier.verify(token)


@pytest.mark.asyncio
async def test_signature_checked_before_expiry(seed, repository):
    """An expired token under a foreign secret is reported as a bad signature."""
    token = TokenIssuer(TokenConfig(secret="rotated-away"), clock=at(T0)).issue(seed.admin)
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0 + timedelta(days=30)))

    with pytest.raises(InvalidSignature):
        await verifier.verify(token)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    ["", "not-a-token", "a.b.c", "eyJhbGciOiJIUzI1NiJ9.e30"],
)
async def test_malformed_tokens(repository, raw):
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0))
    with pytest.raises(MalformedToken):
        await verifier.verify(raw)


@pytest.mark.asyncio
async def test_missing_claims_is_malformed(repository):
    token = jwt.encode({"email": "x@y.z", "iat": 0, "exp": 10**10}, CONFIG.secret, algorithm="HS256")
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0))
    with pytest.raises(MalformedToken):
        await verifier.verify(token)


@pytest.mark.asyncio
async def test_non_uuid_subject_is_malformed(repository):
    iat = int(T0.timestamp())
    token = jwt.encode(
        {"userId": "42", "restaurantId": "7", "iat": iat, "exp": iat + 60},
        CONFIG.secret,
        algorithm="HS256",
    )
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0))
    with pytest.raises(MalformedToken):
        await verifier.verify(token)


@pytest.mark.asyncio
async def test_unknown_subject(seed, repository):
    iat = int(T0.timestamp())
    token = jwt.encode(
        {
            "userId": str(uuid.uuid4()),
            "restaurantId": str(seed.bistro.id),
            "iat": iat,
            "exp": iat + 60,
        },
        CONFIG.secret,
        algorithm="HS256",
    )
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0))
    with pytest.raises(UnknownSubject):
        await verifier.verify(token)


@pytest.mark.asyncio
async def test_deactivated_account(seed, repository):
    """A fresh, correctly signed token still fails for an inactive user."""
    token = TokenIssuer(CONFIG, clock=at(T0)).issue(seed.inactive)
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0))

    with pytest.raises(AccountDeactivated):
        await verifier.verify(token)


@pytest.mark.asyncio
async def test_deactivation_after_issue(seed, repository, db_session):
    token = TokenIssuer(CONFIG, clock=at(T0)).issue(seed.staff)
    verifier = TokenVerifier(CONFIG, repository, clock=at(T0))
    assert (await verifier.verify(token)).user.id == seed.staff.id

    seed.staff.is_active = False
    await db_session.commit()

    with pytest.raises(AccountDeactivated):
        await verifier.verify(token)
