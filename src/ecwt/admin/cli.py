# src/ecwt/admin/cli.py

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import logging
import os
import sys
from typing import Any, Sequence

import structlog

from .env import settings_from_env
from ..adapters.crypto.aes_gcm import KEY_SIZE
from ..adapters.redis.revocation_store import RedisRevocationStore
from ..application.factory import EcwtFactory
from ..domain.exceptions import InvalidTokenError
from ..domain.token import Ecwt
from ..integrations.common.ecwt_factory import create_ecwt_factory


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ecwt",
        description="Create, verify and revoke ecwt tokens (configured from ECWT_* env)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("keygen", help="Print a new random key for ECWT_KEY.")

    create = sub.add_parser("create", help="Create a token.")
    create.add_argument(
        "--data",
        "-d",
        default="{}",
        help="Token data as a JSON object (keys must be in ECWT_SCHEMA_FIELDS).",
    )
    create.add_argument(
        "--ttl",
        type=int,
        default=None,
        help="Time to live in seconds (default: never expires).",
    )

    verify = sub.add_parser("verify", help="Verify a token and print its contents.")
    verify.add_argument("token")

    revoke = sub.add_parser("revoke", help="Revoke a token (requires ECWT_REDIS_URL).")
    revoke.add_argument("token")

    sub.add_parser(
        "purge-revoked",
        help="Remove revocation entries of tokens that have already expired.",
    )

    return parser.parse_args(args=argv)


def _describe(ecwt: Ecwt) -> dict[str, Any]:
    return {
        "token": ecwt.token,
        "id": ecwt.id,
        "created_at": ecwt.created_at,
        "expires_at": ecwt.expires_at,
        "ttl": ecwt.get_ttl(),
        "data": dict(ecwt.data),
    }


async def _verify_any(factory: EcwtFactory, token: str) -> Ecwt:
    """Return the decoded token even if it is expired or revoked."""
    try:
        return await factory.verify(token)
    except InvalidTokenError as exc:
        return exc.token


async def _run(args: argparse.Namespace) -> dict[str, Any]:
    if args.command == "keygen":
        key = base64.urlsafe_b64encode(os.urandom(KEY_SIZE)).decode("ascii")
        return {"key": key}

    factory = create_ecwt_factory(settings_from_env())
    try:
        if args.command == "create":
            ecwt = await factory.create(json.loads(args.data), ttl=args.ttl)
            return _describe(ecwt)

        if args.command == "verify":
            return _describe(await factory.verify(args.token))

        if args.command == "revoke":
            ecwt = await _verify_any(factory, args.token)
            await ecwt.revoke()
            return {"id": ecwt.id, "revoked": factory.revocation_store is not None}

        return {"removed": await factory.purge_revoked()}
    finally:
        if isinstance(factory.revocation_store, RedisRevocationStore):
            await factory.revocation_store.close()


def _configure_logging() -> None:
    # stdout carries the JSON result; logs go to whatever stderr is at call time
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    _configure_logging()

    try:
        summary = asyncio.run(_run(args))
        json.dump({"ok": True, **summary}, sys.stdout, indent=2, default=str)
        sys.stdout.write("\n")
    except Exception as exc:  # noqa: BLE001
        json.dump(
            {"ok": False, "error": type(exc).__name__, "detail": str(exc)},
            sys.stdout,
            indent=2,
        )
        sys.stdout.write("\n")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
