#!/usr/bin/env python3
"""
Offline quoting over a pool snapshot file.

Reads a YAML/JSON snapshot (see `dynamic_amm_quote.integration.snapshot_io`)
and prints one quote as JSON. Price impact is printed both as an exact
"num/den" string and as a float for reading.

Examples:
  python3 tools/quote_cli.py info pool.yaml
  python3 tools/quote_cli.py swap pool.yaml --in-mint USDC --amount 1000000
  python3 tools/quote_cli.py deposit pool.yaml --a 1000 --b 0 --balanced
  python3 tools/quote_cli.py withdraw pool.yaml --lp 5000 --mint USDC
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from fractions import Fraction
from pathlib import Path
from typing import Any

import yaml

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dynamic_amm_quote.errors import QuoteError
from dynamic_amm_quote.integration import PoolHandle, QuoteSettings, load_snapshot


def _jsonable(value: Any) -> Any:
    if isinstance(value, Fraction):
        return {"exact": f"{value.numerator}/{value.denominator}", "approx": float(value)}
    return value


def _quote_to_dict(quote: Any) -> dict:
    return {f.name: _jsonable(getattr(quote, f.name)) for f in dataclasses.fields(quote)}


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Quote swaps, deposits and withdrawals against a pool snapshot.")
    sub = p.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Pool token amounts and virtual price")
    info.add_argument("snapshot", type=Path)

    swap = sub.add_parser("swap", help="Exact-in swap quote")
    swap.add_argument("snapshot", type=Path)
    swap.add_argument("--in-mint", required=True)
    swap.add_argument("--amount", required=True, type=int)
    swap.add_argument("--slippage-bps", type=int, default=None)

    deposit = sub.add_parser("deposit", help="Deposit quote")
    deposit.add_argument("snapshot", type=Path)
    deposit.add_argument("--a", type=int, default=0, help="Token A amount")
    deposit.add_argument("--b", type=int, default=0, help="Token B amount")
    deposit.add_argument("--balanced", action="store_true")
    deposit.add_argument("--slippage-bps", type=int, default=None)

    withdraw = sub.add_parser("withdraw", help="Withdraw quote")
    withdraw.add_argument("snapshot", type=Path)
    withdraw.add_argument("--lp", required=True, type=int, help="Pool LP amount to burn")
    withdraw.add_argument("--mint", default=None, help="Withdraw everything in this token (stable pools)")
    withdraw.add_argument("--slippage-bps", type=int, default=None)

    args = p.parse_args(argv)

    settings = QuoteSettings.from_env()
    settings.configure_logging()

    try:
        handle = PoolHandle(load_snapshot(args.snapshot), settings=settings)
        if args.command == "info":
            quote = handle.pool_info()
        elif args.command == "swap":
            quote = handle.swap_quote(args.in_mint, args.amount, args.slippage_bps)
        elif args.command == "deposit":
            quote = handle.deposit_quote(args.a, args.b, balanced=args.balanced, slippage_bps=args.slippage_bps)
        else:
            quote = handle.withdraw_quote(args.lp, token_mint=args.mint, slippage_bps=args.slippage_bps)
    except (OSError, TypeError, ValueError, yaml.YAMLError, QuoteError) as exc:
        print(f"quote_cli error: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(_quote_to_dict(quote), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
