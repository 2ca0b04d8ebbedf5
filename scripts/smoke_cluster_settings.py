#!/usr/bin/env python3
"""Integration check: read and update cluster settings against a live cluster.

Uses ELASTIC_URL / ELASTIC_API_KEY / ELASTIC_USERNAME / ELASTIC_PASSWORD.
The update sets a transient setting and resets it afterwards.
"""

from __future__ import annotations

import sys

from elastic_sdk import ElasticClient, ElasticHTTPError

SETTING = "cluster.routing.allocation.node_concurrent_recoveries"

passed: list[str] = []
failed: list[tuple[str, str]] = []


def ok(name: str, result: object = None) -> None:
    tag = type(result).__name__ if result is not None else "None"
    print(f"  PASS  {name}  -> {tag}")
    passed.append(name)


def fail(name: str, err: Exception) -> None:
    msg = f"{type(err).__name__}: {err}"[:200]
    print(f"  FAIL  {name}  -> {msg}")
    failed.append((name, msg))


def run(name: str, fn, *, allowed: set[int] | None = None):
    """Run fn(), record pass/fail/expected-error."""
    try:
        result = fn()
        ok(name, result)
        return result
    except ElasticHTTPError as e:
        if allowed and e.status_code in allowed:
            ok(name, e)
        else:
            fail(name, e)
        return None
    except Exception as e:
        fail(name, e)
        return None


def main() -> None:
    client = ElasticClient(allow_http=True, max_retries=0, timeout=15.0)

    print("\n=== Read ===")
    run("get_settings", lambda: client.cluster_get_settings().do())
    run("get_settings_flat", lambda: client.cluster_get_settings().flat_settings(True).do())
    run(
        "get_settings_defaults",
        lambda: client.cluster_get_settings().include_defaults(True).filter_path("defaults.cluster.name").do(),
    )

    print("\n=== Update ===")
    run("update_transient", lambda: client.cluster_update_settings().update({"transient": {SETTING: 2}}).do())
    run("update_string_body", lambda: client.cluster_update_settings().body('{"transient":{"%s":null}}' % SETTING).do())
    run(
        "update_unknown_setting",
        lambda: client.cluster_update_settings().update({"transient": {"no.such.setting": 1}}).do(),
        allowed={400},
    )

    client.close()

    print("\n" + "=" * 60)
    print(f"PASSED: {len(passed)}   FAILED: {len(failed)}")
    if failed:
        print("\nFailed calls:")
        for name, err in failed:
            print(f"  - {name}: {err}")
    print("=" * 60)

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
