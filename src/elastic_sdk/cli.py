"""Command line access to the cluster settings API."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from elastic_sdk.client import ElasticClient
from elastic_sdk.exceptions import ElasticError


def _parse_setting(raw: str) -> tuple[str, Any]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {raw!r}")
    try:
        return key, json.loads(value)
    except ValueError:
        return key, value


def _build_body(args: argparse.Namespace) -> dict[str, Any] | None:
    if not args.persistent and not args.transient:
        return None
    body: dict[str, Any] = {}
    if args.persistent:
        body["persistent"] = dict(args.persistent)
    if args.transient:
        body["transient"] = dict(args.transient)
    return body


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="elastic-cluster-settings",
        description="Read cluster settings, or update them when settings or a body are given.",
    )
    parser.add_argument("--url", help="cluster URL (default: $ELASTIC_URL)")
    parser.add_argument("--api-key", help="API key (default: $ELASTIC_API_KEY)")
    parser.add_argument("--insecure-http", action="store_true", help="allow plain http to non-loopback hosts")
    parser.add_argument("--flat-settings", action="store_true")
    parser.add_argument("--include-defaults", action="store_true")
    parser.add_argument("--pretty", action="store_true")
    parser.add_argument("--human", action="store_true")
    parser.add_argument("--filter-path", help="comma separated response filters")
    parser.add_argument("--persistent", action="append", type=_parse_setting, default=[], metavar="KEY=VALUE")
    parser.add_argument("--transient", action="append", type=_parse_setting, default=[], metavar="KEY=VALUE")
    parser.add_argument("--body", help="raw JSON body for the update")
    return parser


def _main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    body = _build_body(args)
    if body is not None and args.body is not None:
        parser.error("--body cannot be combined with --persistent/--transient")

    try:
        client = ElasticClient(url=args.url, api_key=args.api_key, allow_http=args.insecure_http)
    except ValueError as exc:
        parser.error(str(exc))

    with client:
        service = client.cluster_update_settings()
        if args.flat_settings:
            service.flat_settings(True)
        if args.include_defaults:
            service.include_defaults(True)
        if args.pretty:
            service.pretty(True)
        if args.human:
            service.human(True)
        if args.filter_path:
            service.filter_path(*[p.strip() for p in args.filter_path.split(",") if p.strip()])
        if body is not None:
            service.update(body)
        elif args.body is not None:
            service.update(args.body)

        try:
            result = service.do()
        except ElasticError as exc:
            print(f"Cluster settings request failed: {exc}", file=sys.stderr)
            return 1

    print(json.dumps(result.model_dump(exclude_none=True), indent=2, sort_keys=True))
    return 0


def main() -> None:
    raise SystemExit(_main())
