# test/smoke_api.py
"""
Smoke checks against a running API:
- GET  /healthz
- POST /menu/generate, GET /menu
- POST /menu/swap
- GET  /shopping-list

Usage:
  1) Seed and start the API:
       weekmenu-seed --data-dir ./data
       uvicorn main:app --host 0.0.0.0 --port 8081
  2) Run:
       python test/smoke_api.py --base-url http://127.0.0.1:8081

Note: this generates and modifies a real menu week in the configured database.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from typing import Any, Dict, Optional, Tuple

import requests


def _pretty(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2)


def _assert(cond: bool, msg: str) -> None:
    if not cond:
        raise AssertionError(msg)


def _call(
    base_url: str, method: str, path: str, payload: Optional[Dict[str, Any]] = None, timeout: float = 30.0
) -> Tuple[int, Dict[str, Any]]:
    url = base_url.rstrip("/") + path
    r = requests.request(method, url, json=payload, timeout=timeout)
    try:
        data = r.json()
    except ValueError:
        data = {"_raw": r.text}
    return r.status_code, data


def wait_ready(base_url: str, retries: int = 20, sleep_s: float = 0.5) -> None:
    last_err = None
    for _ in range(retries):
        try:
            code, _ = _call(base_url, "GET", "/healthz", timeout=5.0)
            if code == 200:
                return
        except requests.RequestException as e:
            last_err = e
        time.sleep(sleep_s)
    raise RuntimeError(f"API not reachable at {base_url}. Last error: {last_err}")


def check_generate(base_url: str) -> Dict[str, Any]:
    code, data = _call(base_url, "POST", "/menu/generate")
    _assert(code == 200, f"/menu/generate expected 200, got {code}: {_pretty(data)}")
    _assert(data.get("slots"), f"/menu/generate returned no slots (is the database seeded?): {_pretty(data)}")

    days = [s["day_of_week"] for s in data["slots"]]
    _assert(days == sorted(set(days)), f"/menu/generate days not unique/sorted: {days}")

    code, current = _call(base_url, "GET", "/menu")
    _assert(code == 200 and current["id"] == data["id"], f"/menu did not return the new week: {_pretty(current)}")

    print("\n✅ /menu/generate OK")
    print(_pretty(data))
    return data


def check_swap(base_url: str, week: Dict[str, Any]) -> None:
    slot = week["slots"][0]
    code, data = _call(base_url, "POST", "/menu/swap", {"slot_id": slot["id"]})
    _assert(code == 200, f"/menu/swap expected 200, got {code}: {_pretty(data)}")
    _assert(len(data["slots"]) == len(week["slots"]), f"/menu/swap changed slot count: {_pretty(data)}")

    code, data = _call(base_url, "POST", "/menu/swap", {"slot_id": "does-not-exist"})
    _assert(code == 404, f"/menu/swap with unknown slot expected 404, got {code}")

    print("\n✅ /menu/swap OK")


def check_shopping_list(base_url: str, week: Dict[str, Any]) -> None:
    code, data = _call(base_url, "GET", f"/shopping-list?week_id={week['id']}")
    _assert(code == 200, f"/shopping-list expected 200, got {code}: {_pretty(data)}")
    _assert(data.get("items"), f"/shopping-list returned no items: {_pretty(data)}")
    for k in ("name", "total_quantity", "unit", "category", "from_recipes"):
        _assert(k in data["items"][0], f"/shopping-list item missing {k}: {_pretty(data)}")

    print("\n✅ /shopping-list OK")
    print(_pretty(data))


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--base-url", default="http://127.0.0.1:8081", help="FastAPI base URL")
    args = parser.parse_args()

    try:
        wait_ready(args.base_url)
        week = check_generate(args.base_url)
        check_swap(args.base_url, week)
        check_shopping_list(args.base_url, week)
        print("\n🎉 All checks passed.")
        return 0
    except Exception as e:
        print("\n❌ Check failed:", str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
