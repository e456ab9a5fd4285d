import socket
import sys

from utils import (ArgParser, UsageError, BACKLOG, CHUNK_SIZE, positive_int,
                   byte_sum, format_addr, ignore_sigpipe, safe_write)


class TransferSession:
    """Running checksum and byte count for one accepted connection."""

    def __init__(self):
        self.checksum   = 0
        self.byte_count = 0

    def update(self, chunk):
        self.checksum    = byte_sum(chunk, self.checksum)
        self.byte_count += len(chunk)

    def report(self) -> bytes:
        return f"Sum: {self.checksum} Len: {self.byte_count}\n".encode("ascii")


class Server:
    def __init__(self, args):
        self.buf = bytearray(args.chunk_size)

        try:
            self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as e:
            print(f"opening stream socket: {e}", file=sys.stderr)
            sys.exit(1)

        try:
            self.sock.bind(("", args.port))
        except (OSError, OverflowError) as e:
            print(f"binding stream socket: {e}", file=sys.stderr)
            self.sock.close()
            sys.exit(1)

        self.port = self.sock.getsockname()[1]
        try:
            self.sock.listen(BACKLOG)
        except OSError as e:
            print(f"listening on stream socket: {e}", file=sys.stderr)
            self.sock.close()
            sys.exit(1)
        print(f"[S] Socket has port #{self.port}", flush=True)

    def drain(self, conn, session: TransferSession) -> TransferSession:
        while True:
            try:
                n = conn.recv_into(self.buf)
            except OSError as e:
                # whatever arrived so far still gets reported
                print(f"reading stream message: {e}", file=sys.stderr)
                break
            if n == 0:
                break
            session.update(memoryview(self.buf)[:n])
        return session

    def handle(self, conn, addr) -> TransferSession:
        print(f"[S] Accepted connection from {format_addr(addr)}", flush=True)
        session = TransferSession()
        try:
            self.drain(conn, session)
            print("[S] Ending connection", flush=True)
            try:
                safe_write(conn, session.report())
            except OSError as e:
                print(f"write failed: {e}", file=sys.stderr)
        finally:
            conn.close()
        return session

    def serve_one(self):
        try:
            conn, addr = self.sock.accept()
        except OSError as e:
            print(f"accept: {e}", file=sys.stderr)
            return None
        return self.handle(conn, addr)

    def serve(self):
        while True:
            self.serve_one()

    def close(self):
        self.sock.close()


def build_parser():
    p = ArgParser(prog="server", strict=False)
    p.add_argument("-l", dest="port", type=p.lenient_type(int, 0), default=0, metavar="listener-port",
                   help="Specify port number to which the server must listen.")
    p.add_argument("--chunk_size", type=p.lenient_type(positive_int, CHUNK_SIZE),
                   default=CHUNK_SIZE)
    return p


def parse_args(argv=None):
    p = build_parser()
    try:
        args, extra = p.parse_known_args(argv)
    except UsageError:
        return p.parse_args([])
    if extra:
        p.print_usage(sys.stderr)
    return args


def main(argv=None):
    args = parse_args(argv)
    ignore_sigpipe()
    Server(args).serve()


if __name__ == "__main__":
    main()
