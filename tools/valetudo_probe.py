#!/usr/bin/env python3
"""
Probe a Valetudo (legacy /api) vacuum and dump every read endpoint.

This script is intentionally stdlib-only (no aiohttp), so it can run on the
Home Assistant host without the integration's environment.

It will:
1) Load the host from a Home Assistant config entry (domain=valetudo_vacuum) if available.
2) GET each read endpoint and write the raw JSON to a file.
3) Optionally ask the robot to play its locate sound.

Outputs are written to .valetudo_probe by default.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any


DEFAULT_STORAGE_CONFIG_ENTRIES = Path(".storage/core.config_entries")
DEFAULT_OUT_DIR = Path(".valetudo_probe")

READ_ENDPOINTS = (
    "/api/current_status",
    "/api/get_config",
    "/api/get_fw_version",
    "/api/get_sound_volume",
)

STATE_NAMES = {
    1: "starting",
    2: "charger_disconnected",
    3: "idle",
    4: "remote_active",
    5: "cleaning",
    6: "returning_home",
    7: "manual_mode",
    8: "charging",
    9: "charging_problem",
    10: "paused",
    11: "spot_cleaning",
    12: "error",
    13: "shutting_down",
    14: "updating",
    15: "docking",
    16: "going_to_target",
    17: "zone_cleaning",
}


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _find_valetudo_entry(storage_config_entries: Path) -> dict[str, Any] | None:
    if not storage_config_entries.exists():
        return None

    data = _load_json(storage_config_entries)
    if not isinstance(data, dict):
        return None

    entries = data.get("data", {}).get("entries", [])
    if not isinstance(entries, list):
        return None

    for entry in entries:
        if isinstance(entry, dict) and entry.get("domain") == "valetudo_vacuum":
            return entry
    return None


def _base_url(host: str) -> str:
    host = host.strip().rstrip("/")
    return host if "://" in host else f"http://{host}"


def _urlopen_json(url: str, method: str = "GET", timeout: float = 8.0) -> Any:
    req = urllib.request.Request(url, headers={"Accept": "application/json"}, method=method)
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        raw = resp.read()
        if not raw:
            return None
        return json.loads(raw.decode("utf-8"))


def _safe_filename(s: str) -> str:
    return "".join(c if c.isalnum() or c in ("-", "_", ".") else "_" for c in s)[:180]


def _dump_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")


def _probe_endpoints(base: str) -> dict[str, Any]:
    results: dict[str, Any] = {"base_url": base, "probed": {}}
    for path in READ_ENDPOINTS:
        try:
            results["probed"][path] = _urlopen_json(base + path)
        except urllib.error.HTTPError as e:
            results["probed"][path] = {"_error": f"HTTP {e.code}", "_reason": getattr(e, "reason", None)}
        except Exception as e:  # noqa: BLE001 (probe tool)
            results["probed"][path] = {"_error": repr(e)}
    return results


def _summarize_status(status: Any) -> dict[str, Any]:
    if not isinstance(status, dict) or "_error" in status:
        return {"error": status.get("_error") if isinstance(status, dict) else repr(status)}
    state = status.get("state")
    return {
        "state": STATE_NAMES.get(state, f"unknown({state!r})"),
        "battery": status.get("battery"),
        "fan_power": status.get("fan_power"),
    }


def main(argv: list[str]) -> int:
    p = argparse.ArgumentParser()
    p.add_argument("--host", help="Vacuum host/IP. If omitted, read from HA .storage config entry.")
    p.add_argument(
        "--storage-config-entries",
        default=str(DEFAULT_STORAGE_CONFIG_ENTRIES),
        help="Path to Home Assistant .storage/core.config_entries JSON",
    )
    p.add_argument(
        "--out-dir",
        default=str(DEFAULT_OUT_DIR),
        help="Directory to write probe outputs",
    )
    p.add_argument("--locate", action="store_true", help="PUT /api/find_robot after probing")
    args = p.parse_args(argv)

    host = args.host
    if not host:
        entry = _find_valetudo_entry(Path(args.storage_config_entries))
        if not entry:
            print("Could not find domain=valetudo_vacuum config entry and --host not provided.", file=sys.stderr)
            return 2
        host = entry.get("data", {}).get("host")

    if not host:
        print("Missing host.", file=sys.stderr)
        return 2

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    base = _base_url(host)
    probe = _probe_endpoints(base)
    now = time.strftime("%Y%m%d-%H%M%S")
    probe_path = out_dir / f"valetudo_probe_{_safe_filename(host)}_{now}.json"
    _dump_json(probe_path, probe)

    if args.locate:
        try:
            _urlopen_json(base + "/api/find_robot", method="PUT")
        except Exception as e:  # noqa: BLE001
            print(f"Locate failed: {e!r}", file=sys.stderr)

    print(json.dumps(
        {
            "host": host,
            "base_url": base,
            "status": _summarize_status(probe["probed"].get("/api/current_status")),
            "wrote": [str(probe_path)],
        },
        indent=2,
        sort_keys=True,
    ))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
