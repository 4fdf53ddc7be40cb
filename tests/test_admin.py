# tests/test_admin.py
import base64
import json
import os

import pytest

from ecwt import ConfigurationError, InMemoryDecodeCache, RedisRevocationStore
from ecwt.admin import EcwtSettings, settings_from_env
from ecwt.admin.cli import main
from ecwt.integrations.common.ecwt_factory import create_ecwt_factory

KEY = os.urandom(32)
ENCODED_KEY = base64.urlsafe_b64encode(KEY).decode("ascii").rstrip("=")


@pytest.fixture
def env(monkeypatch):
    for name in (
        "ECWT_KEY",
        "ECWT_NAMESPACE",
        "ECWT_SCHEMA_FIELDS",
        "ECWT_WORKER_ID",
        "ECWT_REDIS_URL",
        "ECWT_CACHE_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ECWT_KEY", ENCODED_KEY)
    return monkeypatch


def test_settings_from_env(env):
    env.setenv("ECWT_NAMESPACE", "app")
    env.setenv("ECWT_SCHEMA_FIELDS", "user_id, role,,")
    env.setenv("ECWT_WORKER_ID", "12")
    env.setenv("ECWT_CACHE_SIZE", "100")

    settings = settings_from_env()
    assert settings.key == KEY
    assert settings.namespace == "app"
    assert settings.schema_fields == ["user_id", "role"]
    assert settings.worker_id == 12
    assert settings.cache_enabled
    assert not settings.revocation_enabled


def test_settings_require_key(env):
    env.delenv("ECWT_KEY")
    with pytest.raises(ConfigurationError, match="ECWT_KEY"):
        settings_from_env()


def test_settings_reject_bad_integers(env):
    env.setenv("ECWT_WORKER_ID", "one")
    with pytest.raises(ConfigurationError, match="ECWT_WORKER_ID"):
        settings_from_env()


def test_settings_reject_negative_cache_size(env):
    env.setenv("ECWT_CACHE_SIZE", "-5")
    with pytest.raises(ConfigurationError, match="ECWT_CACHE_SIZE"):
        settings_from_env()

    env.setenv("ECWT_CACHE_SIZE", "0")
    assert not settings_from_env().cache_enabled


def test_create_ecwt_factory_wiring():
    factory = create_ecwt_factory(
        EcwtSettings(
            key=KEY,
            namespace="app",
            schema_fields=["role"],
            redis_url="redis://localhost:6379/0",
            cache_size=10,
        )
    )

    assert factory.schema.fields == ("role",)
    assert factory.revoked_key == "@ecwt:app:revoked"
    assert isinstance(factory.revocation_store, RedisRevocationStore)
    assert isinstance(factory.decode_cache, InMemoryDecodeCache)

    stateless = create_ecwt_factory(EcwtSettings(key=KEY))
    assert stateless.revocation_store is None
    assert stateless.decode_cache is None


def test_create_ecwt_factory_schema_override():
    factory = create_ecwt_factory(
        EcwtSettings(key=KEY, schema_fields=["role"]),
        schema={"user_id": None},
    )
    assert factory.schema.fields == ("user_id",)


# --- CLI -----------------------------------------------------------------------


def _run_cli(capsys, *argv):
    main(list(argv))
    return json.loads(capsys.readouterr().out)


def test_cli_keygen(capsys):
    out = _run_cli(capsys, "keygen")
    assert out["ok"] is True
    assert len(base64.urlsafe_b64decode(out["key"])) == 32


def test_cli_create_and_verify(env, capsys):
    env.setenv("ECWT_SCHEMA_FIELDS", "user_id,role")

    created = _run_cli(capsys, "create", "--data", '{"user_id": 5, "role": "admin"}', "--ttl", "60")
    assert created["ok"] is True
    assert created["data"] == {"role": "admin", "user_id": 5}

    verified = _run_cli(capsys, "verify", created["token"])
    assert verified["id"] == created["id"]
    assert verified["data"] == created["data"]


def test_cli_reports_errors(env, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["verify", "garbage"])

    assert excinfo.value.code == 1
    out = json.loads(capsys.readouterr().out)
    assert out == {"ok": False, "error": "TokenFormatError", "detail": "Malformed token."}


def test_cli_revoke_without_store(env, capsys):
    created = _run_cli(capsys, "create")
    revoked = _run_cli(capsys, "revoke", created["token"])
    assert revoked == {"ok": True, "id": created["id"], "revoked": False}
