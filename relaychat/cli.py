"""Command-line entry point of the chat server."""

from __future__ import annotations

import logging
import signal
import sys
import threading

from .server import Server

_USAGE = (
    "Usage: {prog} [options]\n"
    "Options:\n"
    "  -h, --help            Show this help message\n"
    "  -cp, --configpath     <path> Path to the configuration file\n"
)


def _print_usage(prog: str) -> None:
    print(_USAGE.format(prog=prog))


def main(argv: list[str] | None = None) -> int:
    """Parse options, build the server and run it until a shutdown signal."""
    args = sys.argv[1:] if argv is None else list(argv)
    prog = "relaychat"
    config_path = ""

    remaining = iter(args)
    for arg in remaining:
        if arg in ("-h", "--help"):
            _print_usage(prog)
            return 0
        if arg in ("-cp", "--configpath"):
            value = next(remaining, None)
            if value is None:
                print("Error: --configpath option requires a value.", file=sys.stderr)
                return 1
            config_path = value
        else:
            print(f"Unknown argument: {arg}", file=sys.stderr)
            _print_usage(prog)
            return 1

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    server: Server | None = None

    def _on_signal(signum: int, _frame: object) -> None:
        print(f"\nShutdown signal ({signum}) received.")
        if server is not None:
            server.stop()

    previous: dict[int, object] = {}
    if threading.current_thread() is threading.main_thread():
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, _on_signal)

    try:
        if config_path:
            print(f"Loading configuration from: {config_path}")
            server = Server(config_path)
        else:
            print("No configuration file provided, using default debug configuration.")
            server = Server()
        with server:
            server.start()
    except Exception as error:
        print(
            f"A fatal error occurred during server startup or execution: {error}",
            file=sys.stderr,
        )
        return 1
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    print("Server shut down gracefully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())