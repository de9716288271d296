"""Seed an administrator into the data service's admin_users table.

Usage:
    admin-gateway-seed <username> [--email EMAIL] [--role ROLE]
    python -m admin_gateway.seed <username>

The password is read from ADMIN_SEED_PASSWORD or prompted for. Exit status is
0 when the user was created, 1 when it already existed, 2 on failure.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys

from admin_gateway.config import Settings, get_settings
from admin_gateway.core.errors import AdminGatewayError
from admin_gateway.infrastructure.data_service import ResilientDataServiceClient
from admin_gateway.infrastructure.observability import setup_logging
from admin_gateway.infrastructure.retry_executor import RetryPolicy
from admin_gateway.services.admin_auth import seed_admin_user

logger = logging.getLogger(__name__)

PASSWORD_ENV = "ADMIN_SEED_PASSWORD"
EXIT_CREATED, EXIT_EXISTS, EXIT_FAILED = 0, 1, 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="admin-gateway-seed", description="Create an administrator account.",
    )
    parser.add_argument("username")
    parser.add_argument("--email", default=None)
    parser.add_argument("--role", default="admin")
    return parser


def build_client(settings: Settings) -> ResilientDataServiceClient:
    return ResilientDataServiceClient(
        settings.data_service_url,
        settings.data_service_key,
        retry_policy=RetryPolicy(
            max_attempts=settings.retry_max_attempts,
            base_delay_ms=settings.retry_base_delay_ms,
            jitter_ms=settings.retry_jitter_ms,
        ),
        timeout_seconds=settings.data_service_timeout_seconds,
    )


async def run(
    args: argparse.Namespace,
    password: str,
    client: ResilientDataServiceClient,
    cost: int,
) -> int:
    try:
        created = await seed_admin_user(
            client, args.username, args.email, password, role=args.role, cost=cost,
        )
    except AdminGatewayError as e:
        logger.error(f"Seeding failed: {e.message}", extra={"error_code": e.code})
        return EXIT_FAILED
    finally:
        await client.aclose()
    return EXIT_CREATED if created else EXIT_EXISTS


def read_password() -> str:
    return os.environ.get(PASSWORD_ENV) or getpass.getpass("Password: ")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, "text")
    password = read_password()
    if not password:
        logger.error("Empty password, nothing seeded")
        return EXIT_FAILED
    return asyncio.run(
        run(args, password, build_client(settings), settings.password_hash_cost),
    )


if __name__ == "__main__":
    sys.exit(main())
