"""Command line entry point.

Usage:
    fsbrowse --dir ./shared --port 8080 --basepath /files
"""

import argparse
from pathlib import Path

import uvicorn

from fsbrowse.core.config import Settings, settings
from fsbrowse.main import create_app


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fsbrowse", description="Browse and manage one directory over HTTP")
    p.add_argument("-d", "--dir", help=f"Directory to serve (default {settings.base_dir})")
    p.add_argument("-p", "--port", type=int, help=f"Port to listen on (default {settings.port})")
    p.add_argument("-H", "--hostname", help=f"Host to bind (default {settings.host})")
    p.add_argument("-b", "--basepath", help=f"URL prefix to mount under (default {settings.base_path!r})")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    overrides: dict = {}
    if args.dir:
        overrides["base_dir"] = Path(args.dir).resolve()
    if args.port:
        overrides["port"] = args.port
    if args.hostname:
        overrides["host"] = args.hostname
    if args.basepath is not None:
        overrides["base_path"] = args.basepath
    if args.debug:
        overrides["debug"] = True

    # model_validate re-runs the base_path validator on the overridden value
    run_settings = Settings.model_validate({**settings.model_dump(), **overrides})
    app = create_app(run_settings)
    uvicorn.run(app, host=run_settings.host, port=run_settings.port, log_level="debug" if run_settings.debug else "info")


if __name__ == "__main__":
    main()
