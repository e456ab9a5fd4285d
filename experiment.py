# experiment.py

import sys, os, csv, time, signal, subprocess

from utils import byte_sum

# ─── CONFIG ─────────────────────────────────────
HERE          = os.path.dirname(os.path.abspath(__file__))
SERVER_SCRIPT = os.path.join(HERE, "server.py")
CLIENT_SCRIPT = os.path.join(HERE, "client.py")
OUT_CSV       = "stream_perf.csv"
IP            = "127.0.0.1"

# payload sizes (bytes) and chunk sizes to sweep
SIZES         = [0, 1, 1 << 10, 1 << 16, 1 << 20, 1 << 24]
CHUNK_SIZES   = [64, 512, 2048, 16384, 65536]

# if the client never finishes, assume this max
MAX_DURATION  = 60.0
# ────────────────────────────────────────────────

def expected_report(payload: bytes) -> bytes:
    return f"Sum: {byte_sum(payload)} Len: {len(payload)}\n".encode("ascii")

def parse_report(line) -> tuple:
    if isinstance(line, bytes):
        line = line.decode("ascii")
    parts = line.split()
    if len(parts) != 4 or parts[0] != "Sum:" or parts[2] != "Len:":
        raise ValueError(f"malformed report: {line!r}")
    return int(parts[1]), int(parts[3])

def start_server(chunk_size: int = 2048):
    cmd = [sys.executable, SERVER_SCRIPT, "-l", "0", "--chunk_size", str(chunk_size)]
    # on Windows we need CREATE_NEW_PROCESS_GROUP, on Unix setsid so killpg works
    if os.name == "nt":
        proc = subprocess.Popen(cmd,
                                creationflags=subprocess.CREATE_NEW_PROCESS_GROUP,
                                stdout=subprocess.PIPE, stderr=subprocess.DEVNULL,
                                text=True)
    else:
        proc = subprocess.Popen(cmd,
                                preexec_fn=os.setsid,
                                stdout=subprocess.PIPE, stderr=subprocess.DEVNULL,
                                text=True)

    # first line is "[S] Socket has port #N"
    line = proc.stdout.readline()
    if "Socket has port #" not in line:
        stop_process(proc)
        raise RuntimeError(f"server did not report its port: {line!r}")
    return proc, int(line.rsplit("#", 1)[1])

def stop_process(proc: subprocess.Popen):
    if proc.poll() is None:
        try:
            if os.name == "nt":
                proc.terminate()
            else:
                os.killpg(proc.pid, signal.SIGTERM)
        except OSError:
            proc.kill()
        proc.wait()
    if proc.stdout:
        proc.stdout.close()

def run_client(port: int, payload: bytes, chunk_size: int):
    cmd = [sys.executable, CLIENT_SCRIPT,
           "-s",           IP,
           "--chunk_size", str(chunk_size),
           str(port)]
    print(f"→ size={len(payload)}, chunk={chunk_size}")
    start = time.time()
    try:
        p = subprocess.run(cmd, input=payload, capture_output=True,
                           timeout=MAX_DURATION)
    except subprocess.TimeoutExpired:
        print(f"!! Client timed out after {MAX_DURATION}s")
        return MAX_DURATION, False
    duration = time.time() - start

    if p.returncode != 0:
        print(f"!! Client exited {p.returncode}: {p.stderr.decode(errors='replace').strip()}")
        return duration, False
    ok = p.stdout == expected_report(payload)
    if not ok:
        try:
            got = parse_report(p.stdout)
            print(f"!! Got sum/len {got}, expected {(byte_sum(payload), len(payload))}")
        except ValueError as e:
            print(f"!! {e}")
    return duration, ok

def main():
    server, port = start_server()
    try:
        with open(OUT_CSV, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["size","chunk_size","duration","ok"])

            for size in SIZES:
                payload = os.urandom(size)
                for chunk in CHUNK_SIZES:
                    dur, ok = run_client(port, payload, chunk)
                    writer.writerow([size, chunk, dur, int(ok)])
    finally:
        stop_process(server)

    print(f"✅ Done! Results in {OUT_CSV}")

if __name__ == "__main__":
    main()
