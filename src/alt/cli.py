from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from alt.config import (
    AuthConfig,
    ConfigurationError,
    LoadTestSettings,
    RateLimitPolicy,
    RunConfig,
    TargetConfig,
    load_config,
)
from alt.loadgen.auth import AuthenticationError
from alt.loadgen.runner import run_authenticated
from alt.report import render_summary
from alt.storage import default_storage

logger = logging.getLogger(__name__)


def _build_settings(args: argparse.Namespace) -> LoadTestSettings:
    if args.config:
        settings = load_config(Path(args.config))
    else:
        if not args.base_url or not args.endpoint:
            msg = "--base-url and --endpoint are required without --config"
            raise ConfigurationError(msg)
        settings = LoadTestSettings(
            auth=AuthConfig(),
            run=RunConfig(target=TargetConfig(base_url=args.base_url, endpoint=args.endpoint)),
        )

    target = settings.run.target
    target_overrides: dict[str, object] = {}
    if args.base_url:
        target_overrides["base_url"] = args.base_url
    if args.endpoint:
        target_overrides["endpoint"] = args.endpoint
    if args.method:
        target_overrides["method"] = args.method.upper()
    if args.body is not None:
        try:
            target_overrides["body"] = json.loads(args.body)
        except json.JSONDecodeError as exc:
            msg = f"--body is not valid JSON: {exc}"
            raise ConfigurationError(msg) from exc
    if args.timeout is not None:
        target_overrides["timeout_sec"] = args.timeout
    if args.insecure:
        target_overrides["verify_tls"] = False
    target = replace(target, **target_overrides)

    run_overrides: dict[str, object] = {"target": target}
    if args.concurrency is not None:
        run_overrides["concurrency"] = args.concurrency
    if args.requests is not None:
        run_overrides["total_requests"] = args.requests
    if args.delay_ms is not None:
        run_overrides["initial_delay_ms"] = args.delay_ms
    if args.max_delay_ms is not None:
        run_overrides["max_delay_ms"] = args.max_delay_ms
    if args.rate_limit_policy:
        run_overrides["rate_limit_policy"] = RateLimitPolicy(args.rate_limit_policy)
    if args.notes:
        run_overrides["notes"] = args.notes
    run = replace(settings.run, **run_overrides)

    auth_overrides: dict[str, object] = {}
    if args.login_endpoint:
        auth_overrides["login_endpoint"] = args.login_endpoint
    if args.email:
        auth_overrides["email"] = args.email
    if args.password:
        auth_overrides["password"] = args.password
    if args.token:
        auth_overrides["token"] = args.token
    auth = replace(settings.auth, **auth_overrides)
    return LoadTestSettings(auth=auth, run=run)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="API Load Tester")
    parser.add_argument("--config", help="JSON settings file")
    parser.add_argument("--base-url", help="Base URL of the API")
    parser.add_argument("--endpoint", help="Endpoint path to load")
    parser.add_argument("--method", help="HTTP method (default GET)")
    parser.add_argument("--body", help="JSON request body for non-GET methods")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS certificate checks")

    parser.add_argument("--login-endpoint", help="Login endpoint path")
    parser.add_argument("--email")
    parser.add_argument("--password")
    parser.add_argument("--token", help="Pre-acquired bearer token")

    parser.add_argument("--concurrency", type=int)
    parser.add_argument("--requests", type=int, help="Total request budget")
    parser.add_argument("--delay-ms", type=float, help="Initial delay between batches")
    parser.add_argument("--max-delay-ms", type=float, help="Ceiling for the adaptive delay")
    parser.add_argument(
        "--rate-limit-policy",
        choices=[p.value for p in RateLimitPolicy],
        help="Grow the delay once per rate-limited batch or once per 429 response",
    )

    parser.add_argument("--save", action="store_true", help="Store the run summary")
    parser.add_argument("--notes", default="")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = _build_settings(args)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return 2
    storage = default_storage() if args.save else None
    try:
        summary = asyncio.run(run_authenticated(settings, storage=storage))
    except AuthenticationError as exc:
        logger.error("Authentication failed: %s", exc)
        return 1
    print(render_summary(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
