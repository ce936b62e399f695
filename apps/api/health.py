"""Container health probe: exit 0 when the local API answers ``/healthz``."""

from __future__ import annotations

import sys

import requests

from linksaver.core.settings import get_settings


def main() -> None:
    settings = get_settings()
    url = f"http://127.0.0.1:{settings.api_port}/healthz"

    try:
        resp = requests.get(url, timeout=5)
    except requests.RequestException as exc:
        print(f"{url}: {exc}", file=sys.stderr)
        sys.exit(1)

    if not resp.ok:
        print(f"{url}: HTTP {resp.status_code}", file=sys.stderr)
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
