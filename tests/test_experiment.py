import os
import subprocess
import sys

import pytest

from experiment import expected_report, parse_report, run_client, start_server, stop_process

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def test_expected_report() -> None:
    assert expected_report(b"ABCDE") == b"Sum: 335 Len: 5\n"
    assert expected_report(b"") == b"Sum: 0 Len: 0\n"


def test_parse_report() -> None:
    assert parse_report(b"Sum: 335 Len: 5\n") == (335, 5)
    assert parse_report("Sum: 0 Len: 0") == (0, 0)
    with pytest.raises(ValueError):
        parse_report("Total: 1 Len: 2\n")
    with pytest.raises(ValueError):
        parse_report("Sum: 1\n")


def test_harness_round_trip() -> None:
    server, port = start_server(chunk_size=512)
    try:
        payload = os.urandom(50000)
        for chunk in (64, 4096):
            duration, ok = run_client(port, payload, chunk)
            assert ok
            assert duration > 0
    finally:
        stop_process(server)
    assert server.poll() is not None


def test_plot_perf_writes_figures(tmp_path) -> None:
    (tmp_path / "stream_perf.csv").write_text(
        "size,chunk_size,duration,ok\n"
        "0,64,0.01,1\n"
        "1024,64,0.02,1\n"
        "1024,2048,0.01,1\n"
        "65536,64,0.20,1\n"
        "65536,2048,0.05,1\n"
        "65536,16384,0.04,0\n"
    )
    p = subprocess.run([sys.executable, os.path.join(ROOT, "plot_perf.py")],
                       cwd=tmp_path, capture_output=True, timeout=120)
    assert p.returncode == 0, p.stderr
    assert (tmp_path / "perf_vs_size.png").exists()
    assert (tmp_path / "perf_vs_chunk_size.png").exists()
