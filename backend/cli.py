from __future__ import annotations
import argparse
import asyncio
import json
import sys
from typing import List, Optional

try:
    from .arithmetic import ArithmeticParseError, evaluate, format_result
    from .dispatcher import Dispatcher
    from .log_config import setup_logging
    from .prompt_builder import build_prompt_request, normalize_tool
    from .providers.registry import ProviderRegistry
    from .settings import get_settings, load_env_file
except ImportError:
    from arithmetic import ArithmeticParseError, evaluate, format_result
    from dispatcher import Dispatcher
    from log_config import setup_logging
    from prompt_builder import build_prompt_request, normalize_tool
    from providers.registry import ProviderRegistry
    from settings import get_settings, load_env_file


def cmd_serve(host: str, port: int) -> int:
    import uvicorn

    try:
        from .app import app
    except ImportError:
        from app import app
    uvicorn.run(app, host=host, port=port, log_level="info")
    return 0


def cmd_prompt(args: argparse.Namespace, registry: ProviderRegistry) -> int:
    try:
        tool = normalize_tool(args.tool)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    if tool == "calculate":
        try:
            print(format_result(evaluate(args.text)))
        except ArithmeticParseError as e:
            print(f"Cannot calculate: {e}", file=sys.stderr)
            return 1
        return 0
    req = build_prompt_request(
        args.text,
        tool=tool,
        language=args.language,
        template=args.template,
        tone=args.tone,
        length=args.length,
        business_type=args.business_type,
        creativity=args.creativity,
        api_preference=args.provider,
    )
    result = asyncio.run(Dispatcher(registry).dispatch(req))
    if not result.ok:
        print(f"Dispatch failed: {getattr(result.error, 'message', result.error)}", file=sys.stderr)
        for a in result.attempts:
            print(f" - {a['provider']}: {a['error']}", file=sys.stderr)
        return 1
    if args.json:
        print(json.dumps({"reply": result.reply, "apiUsed": result.provider, "elapsedMs": result.elapsed_ms}, indent=2))
    else:
        print(result.reply)
        print(f"[{result.provider}, {result.elapsed_ms}ms]", file=sys.stderr)
    return 0


def cmd_status(reg: ProviderRegistry) -> int:
    header = f"{'provider':<12} {'priority':>8}  {'configured':<10} model"
    print(header)
    print("-" * len(header))
    for s in reg.status():
        prio = s["priority"] if s["priority"] is not None else "-"
        print(f"{s['name']:<12} {prio:>8}  {str(s['configured']).lower():<10} {s['model']}")
    return 0


def cmd_check_keys(reg: ProviderRegistry) -> int:
    """Same walk as GET /api/check-keys: every registered provider, priority order first."""
    dispatcher = Dispatcher(reg)

    async def _run() -> List[tuple[str, bool, str]]:
        rows = []
        for s in reg.status():
            name = s["name"]
            if not s["configured"]:
                rows.append((name, False, "missing API key"))
                continue
            res = await dispatcher.probe(name)
            rows.append((name, res.ok, "ok" if res.ok else getattr(res.error, "message", str(res.error))))
        return rows

    rows = asyncio.run(_run())
    for name, ok, detail in rows:
        print(f"{name:<12} {'OK' if ok else 'FAIL':<5} {detail}")
    return 0 if any(ok for _, ok, _ in rows) else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="promoter", description="AI Business Promoter backend")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("serve", help="Run the HTTP API")
    sp.add_argument("--host", default="0.0.0.0")
    sp.add_argument("--port", type=int, default=None, help="Bind port (default: $PORT or 5000)")

    pp = sub.add_parser("prompt", help="Send one prompt through the provider chain")
    pp.add_argument("text")
    pp.add_argument("--provider", default=None, help="Provider name or 'auto'")
    pp.add_argument("--tool", default=None, help="rephrase | translate | hashtags | shorten | calculate")
    pp.add_argument("--language", default=None, help="Target language for --tool translate")
    pp.add_argument("--template", default=None)
    pp.add_argument("--tone", default=None)
    pp.add_argument("--length", default=None)
    pp.add_argument("--business-type", dest="business_type", default=None)
    pp.add_argument("--creativity", type=float, default=None, help="0-100")
    pp.add_argument("--json", action="store_true", help="Print the reply as JSON")

    sub.add_parser("status", help="Show configured providers")
    sub.add_parser("check-keys", help="Probe every configured provider")

    args = parser.parse_args(argv)
    load_env_file()
    setup_logging(args.log_level)

    if args.cmd == "serve":
        port = args.port if args.port is not None else get_settings()["PORT"]
        return cmd_serve(args.host, port)
    registry = ProviderRegistry()
    if args.cmd == "prompt":
        return cmd_prompt(args, registry)
    if args.cmd == "status":
        return cmd_status(registry)
    if args.cmd == "check-keys":
        return cmd_check_keys(registry)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
