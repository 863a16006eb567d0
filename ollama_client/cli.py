"""CLI entry point for ollama-client.

Thin front end over OllamaClient for checking a server by hand.

Entry point:
    ollama-client ping
    ollama-client list [--json]
    ollama-client generate <model> <prompt> [--no-stream]
    ollama-client pull <name> [--insecure]
"""

import argparse
import json
import logging
import sys
from typing import Optional

from ollama_client.client import OllamaClient
from ollama_client.errors import OllamaClientError
from ollama_client.schema import Message

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# ARGUMENT PARSING
# ─────────────────────────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ollama-client",
        description="Talk to an Ollama server from the terminal.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--host", default=None, help="Server URL (default: $OLLAMA_HOST or http://localhost:11434)"
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("ping", help="Check whether the server is up")

    list_p = sub.add_parser("list", help="List local models")
    list_p.add_argument("--json", action="store_true", dest="json_output", help="Full JSON output")

    ps_p = sub.add_parser("ps", help="List models loaded in memory")
    ps_p.add_argument("--json", action="store_true", dest="json_output", help="Full JSON output")

    show_p = sub.add_parser("show", help="Show model details")
    show_p.add_argument("name")

    gen_p = sub.add_parser("generate", help="Generate a completion")
    gen_p.add_argument("model")
    gen_p.add_argument("prompt")
    gen_p.add_argument("--system", default=None, help="System prompt")
    gen_p.add_argument("--json-format", action="store_true", help="Ask for JSON output")
    gen_p.add_argument("--no-stream", action="store_true", help="Wait for the full response")

    chat_p = sub.add_parser("chat", help="Send one chat message")
    chat_p.add_argument("model")
    chat_p.add_argument("message")
    chat_p.add_argument("--no-stream", action="store_true", help="Wait for the full response")

    embed_p = sub.add_parser("embed", help="Compute an embedding")
    embed_p.add_argument("model")
    embed_p.add_argument("prompt")

    pull_p = sub.add_parser("pull", help="Pull a model from the registry")
    pull_p.add_argument("name")
    pull_p.add_argument("--insecure", action="store_true", help="Skip TLS verification")

    return parser


# ─────────────────────────────────────────────────────────────────────
# COMMANDS
# ─────────────────────────────────────────────────────────────────────


def _dump(model) -> None:
    json.dump(model.model_dump(exclude_none=True), sys.stdout, indent=2)
    sys.stdout.write("\n")


def _cmd_ping(client: OllamaClient) -> int:
    if client.ping():
        print("up")
        return 0
    print(f"down ({client.host})")
    return 1


def _cmd_list(client: OllamaClient, json_output: bool = False) -> int:
    result = client.list()
    if json_output:
        _dump(result)
    else:
        for model in result.models:
            print(model.name)
    return 0


def _cmd_ps(client: OllamaClient, json_output: bool = False) -> int:
    result = client.ps()
    if json_output:
        _dump(result)
    else:
        for model in result.models:
            print(model.name)
    return 0


def _cmd_generate(
    client: OllamaClient,
    model: str,
    prompt: str,
    system: Optional[str] = None,
    json_format: bool = False,
    no_stream: bool = False,
) -> int:
    spec = client.generate(model, prompt)
    if system:
        spec.system(system)
    if json_format:
        spec.json()

    if no_stream:
        print(spec.batch().response)
        return 0

    with spec.stream() as records:
        for record in records:
            sys.stdout.write(record.response)
            sys.stdout.flush()
    sys.stdout.write("\n")
    return 0


def _cmd_chat(client: OllamaClient, model: str, message: str, no_stream: bool = False) -> int:
    spec = client.chat(model, Message.user(message))

    if no_stream:
        reply = spec.batch()
        print(reply.message.content if reply.message else "")
        return 0

    with spec.stream() as records:
        for record in records:
            if record.message:
                sys.stdout.write(record.message.content)
                sys.stdout.flush()
    sys.stdout.write("\n")
    return 0


def _cmd_embed(client: OllamaClient, model: str, prompt: str) -> int:
    _dump(client.embeddings(model, prompt).get())
    return 0


def _cmd_pull(client: OllamaClient, name: str, insecure: bool = False) -> int:
    spec = client.pull(name)
    if insecure:
        spec.insecure()

    with spec.stream() as records:
        for record in records:
            progress = ""
            if record.total:
                progress = f" {record.completed or 0}/{record.total}"
            print(f"{record.status}{progress}", file=sys.stderr)
    return 0


def _dispatch(client: OllamaClient, args: argparse.Namespace) -> Optional[int]:
    if args.command == "ping":
        return _cmd_ping(client)
    if args.command == "list":
        return _cmd_list(client, json_output=args.json_output)
    if args.command == "ps":
        return _cmd_ps(client, json_output=args.json_output)
    if args.command == "show":
        _dump(client.show(args.name))
        return 0
    if args.command == "generate":
        return _cmd_generate(
            client,
            args.model,
            args.prompt,
            system=args.system,
            json_format=args.json_format,
            no_stream=args.no_stream,
        )
    if args.command == "chat":
        return _cmd_chat(client, args.model, args.message, no_stream=args.no_stream)
    if args.command == "embed":
        return _cmd_embed(client, args.model, args.prompt)
    if args.command == "pull":
        return _cmd_pull(client, args.name, insecure=args.insecure)
    return None


# ─────────────────────────────────────────────────────────────────────
# ENTRY POINT
# ─────────────────────────────────────────────────────────────────────


def main(argv: Optional[list[str]] = None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(name)s %(message)s", stream=sys.stderr)

    # Load env (OLLAMA_HOST, OLLAMA_TIMEOUT_SECONDS)
    from dotenv import load_dotenv
    load_dotenv()

    try:
        with OllamaClient(args.host) as client:
            code = _dispatch(client, args)
    except OllamaClientError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1

    if code is None:
        parser.print_help()
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
