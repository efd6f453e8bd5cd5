"""Development launcher for the MediaVault API.

Usage:
    python3 start_dev.py [--port 8000] [--no-reload]

Uses ``.venv`` at the repository root (or in ``backend/``) when present,
otherwise the current interpreter, and runs Uvicorn from ``backend/`` so
``mediavault`` is importable without installing. Press Ctrl+C to stop.
"""

from __future__ import annotations

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = ROOT_DIR / "backend"
VENV_DIRS = (ROOT_DIR / ".venv", BACKEND_DIR / ".venv")

if os.name == "nt":
    os.system("")  # enable VT100 on Windows 10+

CYAN = "\033[36m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"


def log(level: str, msg: str) -> None:
    colors = {"info": CYAN, "start": GREEN, "stop": YELLOW, "error": RED}
    print(f"{colors.get(level, '')}[{level}]{RESET} {msg}")


def resolve_python() -> str:
    for venv in VENV_DIRS:
        candidate = venv / ("Scripts/python.exe" if os.name == "nt" else "bin/python")
        if candidate.exists():
            return str(candidate)
    log("info", "No venv found, using the current interpreter")
    return sys.executable


def check_dependencies(python: str) -> bool:
    """Verify the server stack is importable."""
    result = subprocess.run(
        [python, "-c", "import fastapi; import uvicorn; import aiosqlite; import httpx"],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        log("error", "Missing dependencies. Run:")
        log("error", f"  cd {ROOT_DIR} && pip install -e '.[dev]'")
        return False
    return True


def stop(proc: subprocess.Popen) -> None:
    if proc.poll() is not None:
        return
    log("stop", "backend")
    try:
        if os.name == "nt":
            proc.send_signal(signal.CTRL_BREAK_EVENT)
        else:
            os.killpg(os.getpgid(proc.pid), signal.SIGTERM)
        proc.wait(timeout=10)
    except ProcessLookupError:
        pass
    except subprocess.TimeoutExpired:
        proc.kill()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--no-reload", action="store_true")
    args = parser.parse_args()

    python = resolve_python()
    log("info", f"Python: {python}")
    if not check_dependencies(python):
        return 1

    os.environ.setdefault("MEDIAVAULT_DEBUG", "true")
    os.environ.setdefault("MEDIAVAULT_LOG_LEVEL", "INFO")

    cmd = [python, "-m", "uvicorn", "mediavault.main:app", "--host", args.host, "--port", str(args.port)]
    if not args.no_reload:
        cmd.append("--reload")

    log("start", " ".join(cmd))
    if os.name == "nt":
        proc = subprocess.Popen(cmd, cwd=BACKEND_DIR, creationflags=subprocess.CREATE_NEW_PROCESS_GROUP)
    else:
        proc = subprocess.Popen(cmd, cwd=BACKEND_DIR, start_new_session=True)

    base = f"http://{args.host}:{args.port}"
    log("info", f"  API:     {base}/api")
    log("info", f"  Library: {base}/api/library")
    log("info", f"  Docs:    {base}/docs")
    log("info", "Press Ctrl+C to stop")

    try:
        return proc.wait() or 0
    except KeyboardInterrupt:
        print()
        log("info", "Ctrl+C received, shutting down...")
        return 0
    finally:
        stop(proc)


if __name__ == "__main__":
    raise SystemExit(main())
