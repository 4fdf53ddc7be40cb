# tests/test_integrations.py
import asyncio

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from graphql import GraphQLError
from starlette.requests import Request

from ecwt import ConfigurationError, Ecwt
from ecwt.integrations.fastapi import FastAPIEcwtAuth
from ecwt.integrations.strawberry import StrawberryEcwtAuth, StrawberryEcwtContext


@pytest.fixture
def revocable_factory(make_factory, store):
    return make_factory(revocation_store=store)


@pytest.fixture
def client(revocable_factory):
    auth = FastAPIEcwtAuth(factory=revocable_factory)
    app = FastAPI()

    @app.get("/me")
    async def me(ecwt: Ecwt = Depends(auth.get_current_token)):
        return {"id": ecwt.id, "data": dict(ecwt.data)}

    @app.get("/maybe")
    async def maybe(ecwt: Ecwt | None = Depends(auth.get_optional_token)):
        return {"id": ecwt.id if ecwt else None}

    @app.get("/admin")
    async def admin(ecwt: Ecwt = Depends(auth.require_data("role", "admin"))):
        return {"id": ecwt.id}

    return TestClient(app)


def _create(factory, **data):
    return asyncio.run(factory.create(data, ttl=60))


# --- FastAPI -------------------------------------------------------------------


def test_fastapi_bearer_and_cookie(client, revocable_factory):
    ecwt = _create(revocable_factory, role="user", user_id=1)

    resp = client.get("/me", headers={"Authorization": f"Bearer {ecwt.token}"})
    assert resp.status_code == 200
    assert resp.json() == {"id": ecwt.id, "data": {"role": "user", "user_id": 1}}

    client.cookies.set("ecwt", ecwt.token)
    resp = client.get("/me")
    assert resp.status_code == 200
    client.cookies.clear()


def test_fastapi_rejects_missing_and_bad_tokens(client):
    assert client.get("/me").status_code == 401

    resp = client.get("/me", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_fastapi_expired_and_revoked(client, revocable_factory, clock):
    expired = _create(revocable_factory, role="user")
    revoked = _create(revocable_factory, role="user")
    asyncio.run(revoked.revoke())

    resp = client.get("/me", headers={"Authorization": f"Bearer {revoked.token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token revoked"

    clock.advance(61_000)
    resp = client.get("/me", headers={"Authorization": f"Bearer {expired.token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


def test_fastapi_optional_token(client, revocable_factory):
    ecwt = _create(revocable_factory, role="user")

    assert client.get("/maybe").json() == {"id": None}
    assert client.get("/maybe", headers={"Authorization": "Bearer nope"}).json() == {"id": None}
    assert client.get("/maybe", headers={"Authorization": f"Bearer {ecwt.token}"}).json() == {"id": ecwt.id}


def test_fastapi_require_data(client, revocable_factory):
    user = _create(revocable_factory, role="user")
    admin = _create(revocable_factory, role="admin")

    assert client.get("/admin", headers={"Authorization": f"Bearer {user.token}"}).status_code == 403
    assert client.get("/admin", headers={"Authorization": f"Bearer {admin.token}"}).status_code == 200


def test_fastapi_require_data_unknown_field(revocable_factory):
    auth = FastAPIEcwtAuth(factory=revocable_factory)
    with pytest.raises(ConfigurationError):
        auth.require_data("missing")


# --- Strawberry ------------------------------------------------------------------


def _request(token: str | None = None) -> Request:
    headers = []
    if token is not None:
        headers.append((b"authorization", f"Bearer {token}".encode()))
    return Request({"type": "http", "method": "POST", "path": "/graphql", "headers": headers})


class _Info:
    def __init__(self, context):
        self.context = context


def test_strawberry_context_getter(revocable_factory):
    auth = StrawberryEcwtAuth(factory=revocable_factory)
    ecwt = _create(revocable_factory, role="admin")

    optional = auth.make_context_getter(extra_factory=lambda request, token: "extra")
    ctx = asyncio.run(optional(_request(ecwt.token)))
    assert isinstance(ctx, StrawberryEcwtContext)
    assert ctx.token.id == ecwt.id
    assert ctx.extra == "extra"

    assert asyncio.run(optional(_request("nope"))).token is None
    assert asyncio.run(optional(_request())).token is None

    strict = auth.make_context_getter(optional=False)
    with pytest.raises(GraphQLError, match="Invalid token"):
        asyncio.run(strict(_request("nope")))
    with pytest.raises(GraphQLError, match="Not authenticated"):
        asyncio.run(strict(_request()))


def test_strawberry_permissions(revocable_factory):
    auth = StrawberryEcwtAuth(factory=revocable_factory)
    admin = _create(revocable_factory, role="admin")
    user = _create(revocable_factory, role="user")

    require_authenticated = auth.require_authenticated()()
    require_admin = auth.require_data("role", "admin")()

    anonymous = _Info(StrawberryEcwtContext(request=_request(), token=None))
    as_admin = _Info(StrawberryEcwtContext(request=_request(), token=admin))
    as_user = _Info(StrawberryEcwtContext(request=_request(), token=user))

    assert not require_authenticated.has_permission(None, anonymous)
    assert require_authenticated.has_permission(None, as_user)

    assert require_admin.has_permission(None, as_admin)
    assert not require_admin.has_permission(None, as_user)
    assert not require_admin.has_permission(None, anonymous)
