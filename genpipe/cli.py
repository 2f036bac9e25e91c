from __future__ import annotations

import argparse
import asyncio
import base64
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from .errors import FlowCancelled, PipelineError
from .flows.base import Flow
from .flows.std.describe_image import DEFAULT_BACKGROUND, DEFAULT_QUESTION, FLOW_NAME as DESCRIBE_FLOW
from .media.asset import MediaAsset
from .pipeline import Pipeline
from .server.settings import Settings


def _parse_input(flow: Flow, raw: str) -> Any:
    if flow.input_type is str:
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        return raw


async def _run_flow(settings: Settings, name: str, input: Any = None, *, raw: Optional[str] = None) -> Any:
    pipeline = Pipeline.from_settings(settings)
    try:
        if raw is not None:
            input = _parse_input(pipeline.flows.get(name), raw)
        return await pipeline.run(name, input)
    finally:
        await pipeline.aclose()


def cmd_describe(args: argparse.Namespace, settings: Settings) -> int:
    image_path = Path(args.image or settings.DEFAULT_ASSET_PATH)
    if not image_path.is_file():
        print(f"image file not found: {image_path}", file=sys.stderr)
        return 1
    try:
        asset = MediaAsset.from_file(image_path)
    except OSError as ex:
        print(f"failed to read image file {image_path}: {ex}", file=sys.stderr)
        return 1

    payload = {
        "image_b64": base64.b64encode(asset.data).decode("ascii"),
        "filename": image_path.name,
        "question": args.question,
        "background": args.background,
    }
    print(f"Sending request to {settings.GENPIPE_MODEL} model...")
    text = asyncio.run(_run_flow(settings, DESCRIBE_FLOW, payload))
    print("\nModel Response:")
    print(text)
    return 0


def cmd_run(args: argparse.Namespace, settings: Settings) -> int:
    output = asyncio.run(_run_flow(settings, args.flow, raw=args.input))
    print(output if isinstance(output, str) else json.dumps(output, indent=2, default=str))
    return 0


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    from .server.main import create_app, serve

    serve(create_app(settings=settings), port=args.port, host=args.host, settings=settings)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="genpipe", description="Run generation flows against a configured model backend")
    parser.add_argument("--backend", help="Override GENPIPE_BACKEND (echo, ollama, googleai, openai)")
    parser.add_argument("--model", help="Override GENPIPE_MODEL")
    sub = parser.add_subparsers(dest="command", required=True)

    describe = sub.add_parser("describe", help="Ask the model about an image")
    describe.add_argument("image", nargs="?", help="Image file (defaults to DEFAULT_ASSET_PATH)")
    describe.add_argument("--question", default=DEFAULT_QUESTION)
    describe.add_argument("--background", default=DEFAULT_BACKGROUND, help="Background document text; empty to omit")
    describe.set_defaults(func=cmd_describe)

    run = sub.add_parser("run", help="Run a named flow and print its output")
    run.add_argument("flow")
    run.add_argument("input", help="Flow input; parsed as JSON unless the flow takes a string")
    run.set_defaults(func=cmd_run)

    serve = sub.add_parser("serve", help="Serve flows over HTTP until interrupted")
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--host", default="127.0.0.1")
    serve.set_defaults(func=cmd_serve)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    if args.backend:
        settings.GENPIPE_BACKEND = args.backend.lower()
    if args.model:
        settings.GENPIPE_MODEL = args.model
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    try:
        return args.func(args, settings)
    except FlowCancelled as ex:
        print(f"cancelled: {ex.reason}", file=sys.stderr)
        return 1
    except (PipelineError, ValueError, OSError) as ex:
        print(f"Error: {ex}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
