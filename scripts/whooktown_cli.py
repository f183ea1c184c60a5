#!/usr/bin/env python
"""Command line helper for the whooktown client.

Examples:
  python scripts/whooktown_cli.py check-env
  python scripts/whooktown_cli.py health --backoffice
  python scripts/whooktown_cli.py quota
  python scripts/whooktown_cli.py scenes
  python scripts/whooktown_cli.py send-sensor --id 0b6f... --status online --activity fast --extra cpuUsage=42
  python scripts/whooktown_cli.py workflows --out data/workflows.json
  python scripts/whooktown_cli.py operations

Reads WHOOKTOWN_* variables (a local .env is loaded first). Use --verbose for debug logging.
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def _load_env_file(env_path: Path) -> None:
    if not env_path.exists():
        return
    for line in env_path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip(); v = v.strip().strip('"').strip("'")
        if not k:
            continue
        existing = os.environ.get(k)
        # keep any non-empty value already exported
        if existing is None or existing.strip() == '':
            os.environ[k] = v


_load_env_file(PROJECT_ROOT / '.env')

from whooktown import Client, SensorData, Status, Activity, WhooktownError  # noqa: E402

REQUIRED_VARS = ['WHOOKTOWN_TOKEN']
OPTIONAL_VARS = ['WHOOKTOWN_ENV', 'WHOOKTOWN_BASE_URL', 'WHOOKTOWN_ADMIN_SECRET', 'WHOOKTOWN_TIMEOUT',
                 'WHOOKTOWN_MAX_RETRIES', 'WHOOKTOWN_RETRY_WAIT', 'WHOOKTOWN_DEBUG']
SECRET_VARS = {'WHOOKTOWN_TOKEN', 'WHOOKTOWN_ADMIN_SECRET'}


def mask(val: str | None) -> str | None:
    if not val:
        return val
    if len(val) <= 6:
        return '*' * len(val)
    return val[:4] + '...' + val[-4:]


def parse_extra(pairs: List[str]) -> Dict[str, Any]:
    """Parse key=value pairs; values that look like JSON (numbers, bools) are decoded."""
    extra: Dict[str, Any] = {}
    for pair in pairs or []:
        if '=' not in pair:
            raise SystemExit(f'--extra expects key=value, got {pair!r}')
        k, v = pair.split('=', 1)
        try:
            extra[k] = json.loads(v)
        except ValueError:
            extra[k] = v
    return extra


def parse_args(argv: List[str] | None = None):
    p = argparse.ArgumentParser(description='whooktown client helper')
    p.add_argument('--verbose', action='store_true')
    p.add_argument('--out', help='Write JSON output to this file instead of stdout')
    sub = p.add_subparsers(dest='command', required=True)
    sub.add_parser('check-env', help='Show which WHOOKTOWN_* variables are set')
    health = sub.add_parser('health', help='Check service health')
    health.add_argument('--backoffice', action='store_true', help='Also check the backoffice (needs admin secret)')
    sub.add_parser('quota')
    sub.add_parser('scenes')
    send = sub.add_parser('send-sensor')
    send.add_argument('--id', required=True)
    send.add_argument('--status', choices=[s.value for s in Status])
    send.add_argument('--activity', choices=[a.value for a in Activity])
    send.add_argument('--extra', nargs='*', default=[], help='Extra payload fields as key=value')
    sub.add_parser('workflows')
    sub.add_parser('operations')
    return p.parse_args(argv)


def check_env() -> Dict[str, str]:
    report: Dict[str, str] = {}
    for k in REQUIRED_VARS + OPTIONAL_VARS:
        raw = os.getenv(k)
        if not raw or not raw.strip():
            report[k] = 'MISSING' if k in REQUIRED_VARS else '-'
        else:
            report[k] = mask(raw) if k in SECRET_VARS else raw
    return report


def run(args, client: Client) -> Any:
    if args.command == 'health':
        out = {}
        client.sensors.health()
        out['sensors'] = 'ok'
        out['workflow'] = client.workflow.health()
        if args.backoffice:
            client.backoffice.health()
            out['backoffice'] = 'ok'
        return out
    if args.command == 'quota':
        return client.ui.get_quota()
    if args.command == 'scenes':
        return client.ui.list_scenes()
    if args.command == 'send-sensor':
        data = SensorData(
            id=args.id,
            status=Status(args.status) if args.status else None,
            activity=Activity(args.activity) if args.activity else None,
            extra=parse_extra(args.extra),
        )
        client.sensors.send(data)
        return {'sent': data.to_dict()}
    if args.command == 'workflows':
        return [w.to_dict() for w in client.workflow.list()]
    if args.command == 'operations':
        return client.workflow.get_operations()
    raise SystemExit(f'Unknown command {args.command}')


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='[%(levelname)s] %(message)s')

    if args.command == 'check-env':
        data: Any = check_env()
    else:
        try:
            with Client.from_env() as client:
                data = run(args, client)
        except WhooktownError as e:
            print(f'[error] {e.code.value}: {e.message}', file=sys.stderr)
            if e.status_code:
                print(f'[error] HTTP status {e.status_code}', file=sys.stderr)
            return 1

    text = json.dumps(data, ensure_ascii=False, indent=2, default=str)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding='utf-8')
        if args.verbose:
            print(f'[done] Wrote {out_path}')
    else:
        print(text)
    return 0


if __name__ == '__main__':
    sys.exit(main())
