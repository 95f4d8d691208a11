"""Command line front end: ``python -m mcping host[:port]``"""
import argparse
import sys

from .errors import PingError
from .logger import Logger
from .pycraft2.connector import CONNECT_TIMEOUT, split_address
from .server import Server

try:
    import privVars
except ImportError:
    privVars = None

DEBUG = getattr(privVars, "DEBUG", False)
SENTRY_DSN = getattr(privVars, "SENTRY_DSN", None)


def format_status(status) -> str:
    lines = [
        f"version: {status.version.name} (protocol {status.version.protocol})",
        f"players: {status.players.online}/{status.players.max}",
    ]
    lines += [f"  - {p.name} ({p.id})" for p in status.players.sample]
    lines.append(f"description: {status.description}")
    if status.favicon:
        lines.append(f"favicon: {len(status.favicon)} chars")
    return "\n".join(lines)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="mcping", description="Query a Minecraft server's status"
    )
    parser.add_argument("host", help="host or host:port")
    parser.add_argument("-p", "--port", type=int, default=None)
    parser.add_argument("--timeout", type=float, default=CONNECT_TIMEOUT)
    parser.add_argument("--read-timeout", type=float, default=None)
    parser.add_argument("--json", action="store_true", help="print the raw JSON")
    parser.add_argument("--debug", action="store_true", default=DEBUG)
    args = parser.parse_args(argv)

    logger = Logger(debug=args.debug, stream=args.debug, sentry_dsn=SENTRY_DSN)
    server = Server(logger=logger, timeout=args.timeout, read_timeout=args.read_timeout)

    try:
        host, port = split_address(args.host, args.port)
        if args.json:
            print(server.status_json(host, port))
        else:
            print(format_status(server.status(host, port)))
    except PingError as err:
        logger.exception(f"Failed to query {args.host}")
        print(f"{type(err).__name__}: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
