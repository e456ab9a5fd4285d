import socket
import sys

from utils import ArgParser, CHUNK_SIZE, DEFAULT_IP, positive_int, safe_write


class Client:
    def __init__(self, args):
        self.addr = (args.server_ip, args.port)
        self.buf  = bytearray(args.chunk_size)
        self.sock = None

    def connect(self):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self.sock.connect(self.addr)
        except (OSError, OverflowError):
            self.sock.close()
            raise

    def forward(self, source):
        """
        Copy `source` (a binary file object with readinto) to the socket
        until it runs dry, then half-close our sending side.
        """
        while True:
            try:
                n = source.readinto(self.buf)
            except OSError as e:
                print(f"[C] reading input: {e}", file=sys.stderr)
                break
            # None (non-blocking source with nothing ready) also ends the stream
            if n is None or n == 0:
                break
            if n < 0:
                print(f"[C] reading input: read returned {n}", file=sys.stderr)
                break
            try:
                safe_write(self.sock, memoryview(self.buf)[:n])
            except OSError as e:
                print(f"[C] writing on stream socket: {e}", file=sys.stderr)
                break

        try:
            self.sock.shutdown(socket.SHUT_WR)
        except OSError as e:
            print(f"[C] shutting down write side: {e}", file=sys.stderr)

    def print_response(self, sink) -> bool:
        while True:
            try:
                n = self.sock.recv_into(self.buf)
            except OSError as e:
                print(f"[C] reading stream message: {e}", file=sys.stderr)
                return False
            if n == 0:
                return True
            try:
                sink.write(self.buf[:n])
                sink.flush()
            except OSError as e:
                print(f"[C] writing response: {e}", file=sys.stderr)
                return False

    def run(self, source, sink) -> int:
        try:
            self.forward(source)
            ok = self.print_response(sink)
        finally:
            self.close()
        return 0 if ok else 1

    def close(self):
        self.sock.close()


def build_parser():
    p = ArgParser(prog="client", strict=True)
    p.add_argument("-s", dest="server_ip", default=DEFAULT_IP, metavar="server-ip",
                   help="Specify server's IPv4 number.")
    p.add_argument("--chunk_size", type=positive_int, default=CHUNK_SIZE)
    p.add_argument("port", type=int, metavar="server-port",
                   help="Server port number to which client must connect.")
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        socket.inet_pton(socket.AF_INET, args.server_ip)
    except OSError:
        print(f"{args.server_ip}: invalid address/format", file=sys.stderr)
        sys.exit(2)

    client = Client(args)
    try:
        client.connect()
    except (OSError, OverflowError) as e:
        print(f"connecting stream socket: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(client.run(sys.stdin.buffer.raw, sys.stdout.buffer))


if __name__ == "__main__":
    main()
