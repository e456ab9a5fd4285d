# utils.py

import argparse
import signal
import sys

CHUNK_SIZE = 2048
DEFAULT_IP = "127.0.0.1"
BACKLOG    = 5


class UsageError(Exception):
    pass


class ArgParser(argparse.ArgumentParser):
    """
    argparse with the exit policy our two programs want:
    strict parsers print usage and exit(1), lenient ones print
    usage and raise UsageError so the caller can fall back to defaults.
    """

    def __init__(self, *args, strict=True, **kwargs):
        super().__init__(*args, **kwargs)
        self.strict = strict

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: {message}", file=sys.stderr)
        if self.strict:
            sys.exit(1)
        raise UsageError(message)

    def lenient_type(self, convert, default):
        """
        Wrap an option type so a bad value prints usage and yields
        `default` instead of failing the whole parse.
        """
        def parse(text):
            try:
                return convert(text)
            except (ValueError, argparse.ArgumentTypeError) as e:
                self.print_usage(sys.stderr)
                print(f"{self.prog}: bad value {text!r}: {e}", file=sys.stderr)
                return default
        return parse


def positive_int(text: str) -> int:
    n = int(text)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {text}")
    return n


def safe_write(sock, data) -> None:
    """
    Push every byte of `data` into `sock`, looping over partial sends.
    Any OSError from send() propagates on the first failure.
    """
    view = memoryview(data)
    while len(view) > 0:
        n = sock.send(view)
        view = view[n:]


def byte_sum(data, start: int = 0) -> int:
    """
    16-bit wraparound sum of the unsigned byte values in `data`,
    folded into `start`.
    """
    return (start + sum(data)) & 0xFFFF


def format_addr(addr) -> str:
    ip, port = addr[0], addr[1]
    return f"{ip}, port {port}"


def ignore_sigpipe():
    # writes to a closed peer then raise BrokenPipeError instead of killing us
    if hasattr(signal, "SIGPIPE"):
        signal.signal(signal.SIGPIPE, signal.SIG_IGN)
