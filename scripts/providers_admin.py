#!/usr/bin/env python
"""Manage AI provider configuration from the command line.

Usage:
    python scripts/providers_admin.py add --type openai --name "GPT-4" \\
        --endpoint https://api.openai.com/v1/chat/completions --key sk-... --model gpt-4
    python scripts/providers_admin.py list
    python scripts/providers_admin.py enable --id openai-3f2a9c1b7d4e
    python scripts/providers_admin.py disable --id openai-3f2a9c1b7d4e
    python scripts/providers_admin.py delete --id openai-3f2a9c1b7d4e
    python scripts/providers_admin.py set-default --id openai-3f2a9c1b7d4e

Supported types: chat-completion, message-api, generative-content, generic-json
and the aliases openai, deepseek, claude, anthropic, gemini, custom.

Requires DATABASE_URL. Credentials are written to the database but never printed.
"""

import argparse
import sys

from pydantic import ValidationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="providers_admin",
        description="Configure the AI providers used for assistant replies.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Add a new provider (enabled)")
    add.add_argument("--type", required=True, help="Provider type or vendor alias")
    add.add_argument("--name", required=True, help="Display name")
    add.add_argument("--endpoint", required=True, help="Request URL")
    add.add_argument("--key", required=True, help="API key or token")
    add.add_argument("--model", default=None, help="Model override")

    commands.add_parser("list", help="List all configured providers")

    for name, help_text in (
        ("enable", "Enable a provider"),
        ("disable", "Disable a provider"),
        ("delete", "Delete a provider"),
        ("set-default", "Set the default provider"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("--id", required=True, dest="provider_id", help="Provider id")

    return parser


def run(args: argparse.Namespace, store) -> None:
    """Execute one parsed command against a provider store.

    Raises:
        ApiError: Unknown provider id or type.
        ValidationError: Blank required field on add.
    """
    from courier.schemas.providers import ProviderCreate
    from courier.services import provider_admin

    if args.command == "add":
        provider = provider_admin.create_provider(
            store,
            ProviderCreate(
                type=args.type,
                name=args.name,
                endpoint=args.endpoint,
                credential=args.key,
                model=args.model,
            ),
        )
        print(f"Provider added: {provider.id}")

    elif args.command == "list":
        providers = provider_admin.list_providers(store)
        if not providers:
            print("No providers configured.")
            return
        print("Configured AI providers:")
        for p in providers:
            status = "enabled" if p.enabled else "disabled"
            print(f"  {p.id}: [{status}] {p.name} ({p.type}) - {p.model or 'N/A'}")

    elif args.command in ("enable", "disable"):
        enabled = args.command == "enable"
        provider_admin.set_provider_enabled(store, args.provider_id, enabled)
        print(f"Provider {args.command}d: {args.provider_id}")

    elif args.command == "delete":
        provider_admin.delete_provider(store, args.provider_id)
        print(f"Provider deleted: {args.provider_id}")

    elif args.command == "set-default":
        provider_admin.set_default_provider(store, args.provider_id)
        print(f"Default provider set to: {args.provider_id}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from courier.db.session import get_session_factory
    from courier.errors import ApiError
    from courier.services.stores import SqlProviderStore

    store = SqlProviderStore(get_session_factory())
    try:
        run(args, store)
    except ApiError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"ERROR: {e.errors()[0]['loc'][0]}: {e.errors()[0]['msg']}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
