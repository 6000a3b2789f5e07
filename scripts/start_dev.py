#!/usr/bin/env python3
"""
Run the cart store and the cart engine side by side with auto-reload.

Ports come from CART_STORE_PORT and CART_ENGINE_PORT (config/.env is read
first). The engine is started once the store answers on /health.
"""

import argparse
import importlib.util
import os
import shutil
import subprocess
import sys
import time
from pathlib import Path

import httpx
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

REQUIRED_MODULES = ("fastapi", "uvicorn", "httpx", "pydantic_settings", "jwt", "dotenv")

# (label, ASGI app, port variable, default port)
SERVICES = (
    ("cart store", "cart_store.main:app", "CART_STORE_PORT", 8001),
    ("cart engine", "cart_engine.main:app", "CART_ENGINE_PORT", 8000),
)


def missing_modules() -> list[str]:
    return [name for name in REQUIRED_MODULES if importlib.util.find_spec(name) is None]


def ensure_env_file() -> Path:
    """Seed config/.env from the example on first run"""
    env_file = CONFIG_DIR / ".env"
    if not env_file.exists():
        shutil.copy(CONFIG_DIR / ".env.example", env_file)
        print(f"Created {env_file.relative_to(PROJECT_ROOT)} from .env.example")
    return env_file


def service_port(variable: str, default: int) -> int:
    return int(os.environ.get(variable, default))


def launch(app_path: str, port: int) -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", app_path, "--reload", "--host", "0.0.0.0", "--port", str(port)],
        cwd=PROJECT_ROOT,
        env=os.environ.copy(),
    )


def wait_until_healthy(port: int, timeout: float = 15.0) -> bool:
    deadline = time.monotonic() + timeout
    url = f"http://127.0.0.1:{port}/health"
    while time.monotonic() < deadline:
        try:
            if httpx.get(url, timeout=1.0).status_code == 200:
                return True
        except httpx.TransportError:
            pass  # not listening yet
        time.sleep(0.25)
    return False


def run(processes: list[subprocess.Popen]) -> None:
    for label, app_path, variable, default in SERVICES:
        port = service_port(variable, default)
        print(f"Starting {label} on http://localhost:{port}")
        processes.append(launch(app_path, port))
        if not wait_until_healthy(port):
            print(f"{label} did not report healthy on port {port}")
            return

    store_port = service_port(*SERVICES[0][2:])
    engine_port = service_port(*SERVICES[1][2:])
    print(f"\nEngine docs: http://localhost:{engine_port}/docs")
    print(f"Store docs:  http://localhost:{store_port}/docs")
    print("Bearer token: python scripts/issue_token.py <user-id>")
    print("Ctrl+C stops both services")

    for process in processes:
        process.wait()


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--env-only", action="store_true", help="create config/.env and exit")
    args = parser.parse_args()

    missing = missing_modules()
    if missing:
        print(f"Missing modules: {', '.join(missing)}. Run: pip install -e .")
        sys.exit(1)

    load_dotenv(ensure_env_file())
    if args.env_only:
        return

    processes: list[subprocess.Popen] = []
    try:
        run(processes)
    except KeyboardInterrupt:
        print("\nStopping services")
    finally:
        for process in processes:
            process.terminate()
        for process in processes:
            process.wait()


if __name__ == "__main__":
    main()
