import argparse
import asyncio
import sys
from pathlib import Path
from subrelay.core.config import settings
from subrelay.core.logging import configure_logging
from subrelay.services.http_client import build_async_client
from subrelay.services.license import check_license
from subrelay.services.query_inputs import parse_limit
from subrelay.services.subscription import process_subscription, render_subscription
from subrelay.services.upstream import UpstreamError, fetch_subscription


async def _read_source(file: str | None, url: str | None) -> str:
    if file:
        return Path(file).read_bytes().decode("utf-8")
    async with build_async_client() as client:
        return await fetch_subscription(client, url or settings.UPSTREAM_URL)


async def rewrite(file: str | None, url: str | None, label: str, sub_name: str, limit: int, plain: bool) -> int:
    try:
        raw = await _read_source(file, url)
    except (OSError, UnicodeDecodeError, UpstreamError) as e:
        print(f"[ERR] could not read source: {e}", file=sys.stderr)
        return 1
    render = render_subscription if plain else process_subscription
    print(render(raw, label, sub_name, limit))
    return 0


async def license_status(key: str, ip: str | None) -> int:
    async with build_async_client() as client:
        res = await check_license(client, settings.LICENSE_SOURCE_URL, key, ip)
    print(f"[LICENSE:{res.status.value}] {res.detail}")
    return 0 if res.ok else 1


def serve(host: str, port: int, reload: bool):
    import uvicorn

    uvicorn.run("subrelay.main:app", host=host, port=port, reload=reload, log_level=settings.LOG_LEVEL.lower())


def main():
    configure_logging(settings.LOG_LEVEL)
    parser = argparse.ArgumentParser(prog="subrelay")
    sub = parser.add_subparsers(dest="cmd")

    s = sub.add_parser("serve")
    s.add_argument("--host", default=settings.HOST)
    s.add_argument("--port", type=int, default=settings.PORT)
    s.add_argument("--reload", action="store_true")

    r = sub.add_parser("rewrite")
    src = r.add_mutually_exclusive_group()
    src.add_argument("--file")
    src.add_argument("--url")
    r.add_argument("--label", default=settings.DEFAULT_LABEL)
    r.add_argument("--sub", default=settings.DEFAULT_SUBSCRIPTION_NAME)
    r.add_argument("--limit", default="0")
    r.add_argument("--plain", action="store_true", help="print the relabelled list before base64")

    c = sub.add_parser("check-license")
    c.add_argument("--key", required=True)
    c.add_argument("--ip")

    args = parser.parse_args()
    if args.cmd == "serve":
        serve(args.host, args.port, args.reload)
    elif args.cmd == "rewrite":
        raise SystemExit(
            asyncio.run(rewrite(args.file, args.url, args.label, args.sub, parse_limit(args.limit), args.plain))
        )
    elif args.cmd == "check-license":
        raise SystemExit(asyncio.run(license_status(args.key, args.ip)))
    else:
        parser.print_help()

if __name__ == "__main__":
    main()
