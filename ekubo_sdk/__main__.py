from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import Any, List, Optional

from ekubo_sdk.client import EkuboClient
from ekubo_sdk.config import PollingConfig
from ekubo_sdk.errors import EkuboError
from ekubo_sdk.log import configure_logging
from ekubo_sdk.types import SwapQuote
from ekubo_sdk.utils import subtract_slippage, to_int_value


def _print(obj: Any) -> None:
    sys.stdout.write(json.dumps(obj, indent=2) + "\n")
    sys.stdout.flush()


async def _cmd_quote(client: EkuboClient, args: argparse.Namespace) -> int:
    quote = await client.get_quote(args.sell, args.buy, to_int_value(args.amount))
    out = {"quote": quote.to_dict()}
    if args.calls:
        slippage = args.slippage if args.slippage is not None else client.config.default_slippage_percent
        minimum = subtract_slippage(quote.total, slippage)
        calls = client.generate_swap_calls(args.sell, args.buy, quote, minimum, slippage_percent=slippage)
        out["minimum_received"] = str(minimum)
        out["executable"] = calls.is_executable
        out["calls"] = calls.to_list()
    _print(out)
    return 0


async def _cmd_tokens(client: EkuboClient, args: argparse.Namespace) -> int:
    if args.remote:
        tokens = await client.fetch_tokens()
        _print([asdict(t) for t in tokens])
    else:
        _print([asdict(t) for t in client.tokens.all()])
    return 0


async def _cmd_poll(client: EkuboClient, args: argparse.Namespace) -> int:
    done = asyncio.Event()
    seen = {"quotes": 0}
    stop_reason: List[str] = []

    def on_quote(quote: SwapQuote) -> None:
        seen["quotes"] += 1
        _print({"n": seen["quotes"], "quote": quote.to_dict()})
        if args.count and seen["quotes"] >= args.count:
            done.set()

    def on_error(exc: BaseException) -> None:
        payload = exc.to_dict() if isinstance(exc, EkuboError) else {"error": str(exc)}
        sys.stderr.write(json.dumps(payload) + "\n")

    def on_stop(reason: str) -> None:
        stop_reason.append(reason)
        done.set()

    poller = client.create_quote_poller(
        args.sell,
        args.buy,
        to_int_value(args.amount),
        on_quote=on_quote,
        on_error=on_error,
        on_stop=on_stop,
        polling=client.config.polling.merged(interval_s=args.interval),
    )
    async with poller:
        await done.wait()
    return 1 if stop_reason and stop_reason[0] == "errors" else 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ekubo_sdk", description="Ekubo routing API client")
    parser.add_argument("--chain", default=None, help="chain name or id (default: EKUBO_CHAIN or mainnet)")
    parser.add_argument("--log-level", default="WARNING", help="logging level")
    sub = parser.add_subparsers(dest="cmd", required=True)

    q = sub.add_parser("quote", help="fetch a swap quote")
    q.add_argument("sell", help="token sold (symbol or address)")
    q.add_argument("buy", help="token bought (symbol or address)")
    q.add_argument("amount", help="raw amount; negative for exact output")
    q.add_argument("--slippage", type=int, default=None, help="slippage percent")
    q.add_argument("--calls", action="store_true", help="also print the swap calls")

    t = sub.add_parser("tokens", help="list known tokens")
    t.add_argument("--remote", action="store_true", help="fetch the token list from the API")

    p = sub.add_parser("poll", help="poll a quote")
    p.add_argument("sell")
    p.add_argument("buy")
    p.add_argument("amount")
    p.add_argument("--interval", type=float, default=None, help="seconds between quotes")
    p.add_argument("--count", type=int, default=0, help="stop after N quotes (0 = run until errors)")
    return parser


async def _run(args: argparse.Namespace) -> int:
    handlers = {"quote": _cmd_quote, "tokens": _cmd_tokens, "poll": _cmd_poll}
    async with EkuboClient(args.chain) as client:
        return await handlers[args.cmd](client, args)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(getattr(logging, str(args.log_level).upper(), logging.WARNING))
    try:
        return asyncio.run(_run(args))
    except EkuboError as exc:
        sys.stderr.write(json.dumps(exc.to_dict()) + "\n")
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
