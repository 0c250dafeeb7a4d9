"""
azkeyvault CLI — read and write Key Vault secrets from the shell.

Usage:
    azkeyvault get NAME [--secret-version V] [--json]   # Print a secret value
    azkeyvault versions NAME                            # List versions of a secret
    azkeyvault list [--all]                             # List secrets (first page, or all)
    azkeyvault set NAME VALUE [--content-type T] [--tag K=V ...]
    azkeyvault status                                   # Show effective configuration
    azkeyvault version                                  # Show version
"""

from __future__ import annotations

import argparse
import json
import logging

from azkeyvault.errors import VaultError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="azkeyvault",
        description="azkeyvault — cached Azure Key Vault secret client.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # get
    get_parser = subparsers.add_parser("get", help="Print a secret value")
    get_parser.add_argument("name", help="Secret name")
    get_parser.add_argument(
        "--secret-version", dest="secret_version", help="Version (default: latest)"
    )
    get_parser.add_argument("--json", action="store_true", help="Print full secret as JSON")

    # versions
    versions_parser = subparsers.add_parser("versions", help="List versions of a secret")
    versions_parser.add_argument("name", help="Secret name")

    # list
    list_parser = subparsers.add_parser("list", help="List secrets")
    list_parser.add_argument("--all", action="store_true", help="Follow nextLink through all pages")

    # set
    set_parser = subparsers.add_parser("set", help="Create or update a secret")
    set_parser.add_argument("name", help="Secret name")
    set_parser.add_argument("value", help="Secret value")
    set_parser.add_argument("--content-type", help="Content type hint")
    set_parser.add_argument(
        "--tag", action="append", default=[], metavar="K=V", help="Tag (repeatable)"
    )

    # status
    subparsers.add_parser("status", help="Show effective configuration")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.version or args.command == "version":
        from azkeyvault import __version__

        print(f"azkeyvault {__version__}")
        return 0

    if args.command == "status":
        return _cmd_status()
    if args.command in ("get", "versions", "list", "set"):
        return _run(args)

    parser.print_help()
    return 0


def _parse_tags(pairs: list[str]) -> dict[str, str]:
    tags: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid tag {pair!r}, expected K=V")
        tags[key] = value
    return tags


def _run(args: argparse.Namespace) -> int:
    from azkeyvault.client import build_repository

    try:
        tags = _parse_tags(getattr(args, "tag", []))
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    try:
        with build_repository() as repo:
            if args.command == "get":
                secret = repo.get_secret(args.name, args.secret_version)
                if args.json:
                    print(json.dumps(secret.model_dump(mode="json", by_alias=True), indent=2))
                else:
                    print(secret.value)

            elif args.command == "versions":
                for v in repo.get_secret_versions(args.name):
                    state = "enabled" if v.attributes.enabled else "disabled"
                    print(f"{v.version}  {v.attributes.updated.isoformat()}  {state}")

            elif args.command == "list":
                items = repo.iter_secrets() if args.all else repo.get_secrets()
                for item in items:
                    print(item.name)
                if not args.all and items.has_more:
                    print("(more results — use --all)")

            elif args.command == "set":
                secret = repo.set_secret(
                    args.name, args.value, content_type=args.content_type, tags=tags or None
                )
                print(f"Stored {secret.name} version {secret.version}")

    except VaultError as e:
        print(f"Error: {e}")
        return 1
    except ValueError as e:
        print(f"Error: {e}")
        print("Check AZKV_* environment variables.")
        return 1
    return 0


def _cmd_status() -> int:
    from azkeyvault import __version__
    from azkeyvault.config import get_config

    cfg = get_config()
    print(f"azkeyvault v{__version__}")
    print()
    print(f"  Vault:       {cfg.vault_url or '(not set — AZKV_VAULT_URL)'}")
    print(f"  API version: {cfg.api_version}")
    print(f"  Token:       {cfg.token_source}")
    print(f"  Cache:       {cfg.cache.backend}")
    if cfg.cache.backend == "redis":
        print(f"               {cfg.cache.redis_url} ({cfg.cache.prefix}*)")
    print(f"  Context:     {cfg.context_discriminator or '(empty)'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
