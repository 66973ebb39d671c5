import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .errors import StorageError
from .main import run
from .repository import MappingStore

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "127.0.0.1:8080"


def parse_address(value: str) -> Tuple[str, int]:
    """Разбирает адрес вида host:port."""
    host, sep, port = value.rpartition(":")
    if not sep or not host:
        raise argparse.ArgumentTypeError(f"expected HOST:PORT, got {value!r}")
    try:
        port_num = int(port)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {port!r}") from None
    if not 0 < port_num < 65536:
        raise argparse.ArgumentTypeError(f"port out of range: {port_num}")
    return host.strip("[]"), port_num


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cc", description="Tiny URL shortener.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP server.")
    serve.add_argument("db", type=Path, help="Path to the database file.")
    serve.add_argument(
        "--url",
        type=parse_address,
        default=parse_address(DEFAULT_ADDRESS),
        help=f"Address to listen on (default {DEFAULT_ADDRESS}).",
    )
    serve.add_argument(
        "--index", type=Path, help="Path to an html file to serve on the root path."
    )

    ls = sub.add_parser("ls", help="List all code -> url mappings in the database.")
    ls.add_argument("db", type=Path, help="Path to the database file.")
    return parser


def list_mappings(path: Path) -> int:
    if not path.is_file():
        print(f"database file does not exist or is not a file: {path}", file=sys.stderr)
        return 1
    store = MappingStore(path)
    try:
        mappings = store.list()
    except StorageError as exc:
        print(f"error reading mappings: {exc}", file=sys.stderr)
        return 1

    suffix = "" if len(mappings) == 1 else "s"
    print(f"{len(mappings)} mapping{suffix} found in {path}:")
    for mapping in mappings:
        print(f"  {mapping.code} -> {mapping.url}")
    return 0


def serve(path: Path, address: Tuple[str, int], index: Optional[Path]) -> int:
    if index is not None and not index.is_file():
        print(f"index file does not exist or is not a file: {index}", file=sys.stderr)
        return 1
    store = MappingStore(path)
    try:
        store.init()
    except StorageError as exc:
        print(exc, file=sys.stderr)
        return 1
    host, port = address
    run(store, host, port, index)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Точка входа для console_script `cc`."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        return serve(args.db, args.url, args.index)
    return list_mappings(args.db)


if __name__ == "__main__":
    sys.exit(main())
