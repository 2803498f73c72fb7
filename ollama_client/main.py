"""Command-line entry point: talk to a local Ollama server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from ollama_client.client import Client
from ollama_client.config import get_config
from ollama_client.core.errors import OllamaError
from ollama_client.core.logging_config import setup_logging
from ollama_client.protocol.options import ModelOptions
from ollama_client.protocol.requests import (
    ChatMessage,
    ChatRequest,
    DeleteRequest,
    EmbedRequest,
    GenerateRequest,
    ShowRequest,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ollama-client", description="Ollama HTTP API client.")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--base-url", help="Server URL (default from config / OLLAMA_HOST)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("version", help="Print server version")
    sub.add_parser("list", help="List local models")
    sub.add_parser("ps", help="List running models")

    p = sub.add_parser("show", help="Show model details")
    p.add_argument("model")

    p = sub.add_parser("delete", help="Delete a model")
    p.add_argument("model")

    for name in ("generate", "chat"):
        p = sub.add_parser(name, help=f"Stream a {name} completion")
        p.add_argument("model")
        p.add_argument("prompt")
        p.add_argument("--temperature", type=float, default=0.0)
        p.add_argument("--seed", type=int, default=0)

    p = sub.add_parser("embed", help="Print embedding sizes")
    p.add_argument("model")
    p.add_argument("text", nargs="+")
    return parser


async def _print_stream(stream, fragment) -> None:
    async with stream:
        async for record in stream.records():
            print(fragment(record), end="", flush=True)
    print()


async def run(args: argparse.Namespace, client: Client) -> None:
    if args.command == "version":
        print(await client.version())
    elif args.command == "list":
        for m in (await client.list_models()).models:
            print(f"{m.name}\t{m.size}\t{m.modified_at or ''}")
    elif args.command == "ps":
        for m in (await client.list_running()).models:
            print(f"{m.name}\t{m.size_vram}\t{m.expires_at or ''}")
    elif args.command == "show":
        info = await client.show_model(ShowRequest(model=args.model))
        d = info.details
        print(f"format={d.format} family={d.family} parameters={d.parameter_size} quantization={d.quantization_level}")
    elif args.command == "delete":
        await client.delete_model(DeleteRequest(model=args.model))
    elif args.command == "embed":
        resp = await client.embed(EmbedRequest(model=args.model, input=args.text))
        for text, vector in zip(args.text, resp.embeddings):
            print(f"{len(vector)}\t{text}")
    elif args.command == "generate":
        options = ModelOptions(temperature=args.temperature, seed=args.seed)
        stream = await client.generate(GenerateRequest(model=args.model, prompt=args.prompt, options=options))
        await _print_stream(stream, lambda r: r.response)
    elif args.command == "chat":
        options = ModelOptions(temperature=args.temperature, seed=args.seed)
        request = ChatRequest(
            model=args.model,
            messages=[ChatMessage(role="user", content=args.prompt)],
            options=options,
        )
        await _print_stream(await client.chat(request), lambda r: r.message.content)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = get_config(args.config)
    except ValidationError as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 2
    setup_logging(level=config.logging.level, use_json=config.logging.json_format)
    client = Client(config.client, base_url=args.base_url)
    try:
        asyncio.run(run(args, client))
    except OllamaError as e:
        logger.error("command failed", extra={"command": args.command, "error": str(e)})
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
