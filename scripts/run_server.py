from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

import uvicorn

PROJECT_ROOT = Path(__file__).resolve().parent.parent
STREAMLIT_APP = PROJECT_ROOT / "streamlit_app.py"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the MEA maturity assessment servers.")
    sub = parser.add_subparsers(dest="command")

    api = sub.add_parser("api", help="Serve the JSON/WebSocket API with uvicorn (default)")
    api.add_argument("--host", default="0.0.0.0")
    api.add_argument("--port", type=int, default=8000)
    api.add_argument("--reload", action="store_true")

    ui = sub.add_parser("ui", help="Serve the Streamlit dashboard")
    ui.add_argument("--port", type=int, default=8501)

    return parser


def streamlit_command(port: int) -> list[str]:
    return [
        sys.executable,
        "-m",
        "streamlit",
        "run",
        str(STREAMLIT_APP),
        "--server.port",
        str(port),
    ]


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.command == "ui":
        print(f"[run-server] Starting Streamlit on port {args.port}…")
        subprocess.run(streamlit_command(args.port), cwd=str(PROJECT_ROOT), check=True)
        return

    uvicorn.run(
        "mea_dashboard.web.main:app",
        host=getattr(args, "host", "0.0.0.0"),
        port=getattr(args, "port", 8000),
        reload=getattr(args, "reload", False),
    )


if __name__ == "__main__":
    main()
