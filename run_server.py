#!/usr/bin/env python
"""
Production Server Entry Point

Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py

    Or with Gunicorn:
    gunicorn pos_reporting.main:app -c gunicorn.conf.py
"""

import argparse
import os
import subprocess

APP_PATH = "pos_reporting.main:app"


def run_dev_server(port: int):
    """Run development server with auto-reload."""
    import uvicorn

    uvicorn.run(
        APP_PATH,
        host="0.0.0.0",
        port=port,
        reload=True,
        reload_dirs=["pos_reporting"],
        log_level="debug",
        access_log=True,
    )


def run_prod_server(port: int):
    """Run production server with Uvicorn directly."""
    import uvicorn

    # Each worker holds its own pool and summary cache
    workers = int(os.getenv("WORKERS", 4))

    uvicorn.run(
        APP_PATH,
        host="0.0.0.0",
        port=port,
        workers=workers,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
        date_header=True,
    )


def run_gunicorn():
    """Run with Gunicorn (recommended for production)."""
    subprocess.run(["gunicorn", APP_PATH, "-c", "gunicorn.conf.py"], check=False)


def main():
    parser = argparse.ArgumentParser(description="POS Reporting API Server")
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Run in development mode with auto-reload",
    )
    parser.add_argument(
        "--gunicorn",
        action="store_true",
        help="Run with Gunicorn (production)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("API_PORT", 5000)),
        help="Port to run on (default: 5000)",
    )

    args = parser.parse_args()
    os.environ["BIND"] = f"0.0.0.0:{args.port}"

    if args.dev:
        print("Starting development server...")
        run_dev_server(args.port)
    elif args.gunicorn:
        print("Starting production server with Gunicorn...")
        run_gunicorn()
    else:
        print("Starting production server with Uvicorn...")
        run_prod_server(args.port)


if __name__ == "__main__":
    main()
