import argparse
import json
import sys

from . import __version__
from .env import get_settings, load_env
from .errors import InternalError, LagoinhaError, ServiceError
from .normalize import normalize
from .race import get_address
from .services import SERVICES


def _print_json(data, stream=None) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2), file=stream or sys.stdout)


def _config_error(e: ValueError) -> int:
    print(f"lagoinha: invalid configuration: {e}", file=sys.stderr)
    return 3


def cmd_lookup(args: argparse.Namespace) -> int:
    try:
        address = get_address(args.cep, settle_delay=args.settle_delay, timeout=args.timeout)
    except ValueError as e:
        return _config_error(e)
    except InternalError as e:
        _print_json(e.to_dict(), sys.stderr)
        return 2
    except LagoinhaError as e:
        _print_json(e.to_dict(), sys.stderr)
        return 1
    _print_json(address.to_dict())
    return 0


def cmd_services(args: argparse.Namespace) -> int:
    try:
        timeout = args.timeout if args.timeout is not None else get_settings().http_timeout
    except ValueError as e:
        return _config_error(e)

    failed = 0
    for source, service in SERVICES.items():
        try:
            result = {"service": source.value, "address": normalize(service.lookup(args.cep, timeout=timeout)).to_dict()}
        except ServiceError as e:
            failed += 1
            result = {"service": source.value, "error": e.to_dict()}
        _print_json(result)
    return 1 if failed == len(SERVICES) else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lagoinha", description="Look up Brazilian postal codes (CEP)")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    lkp = subparsers.add_parser("lookup", help="Race all services and print the first address found")
    lkp.add_argument("cep", help="Postal code, 12345678 or 12345-678")
    lkp.add_argument("--settle-delay", type=float, help="Seconds a failed service waits before finishing (min 1, default 2)")
    lkp.add_argument("--timeout", type=float, help="Per-request timeout in seconds (default 15)")
    lkp.set_defaults(func=cmd_lookup)

    svc = subparsers.add_parser("services", help="Query each service on its own and print every result")
    svc.add_argument("cep", help="Postal code, 12345678 or 12345-678")
    svc.add_argument("--timeout", type=float, help="Per-request timeout in seconds (default 15)")
    svc.set_defaults(func=cmd_services)
    return parser


def main(argv=None) -> None:
    # Load .env if present (LAGOINHA_SETTLE_DELAY, LAGOINHA_LOG_LEVEL, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        raise SystemExit(args.func(args))

    parser.print_help()


if __name__ == "__main__":
    main()
