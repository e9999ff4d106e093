"""
tss CLI — read and manage secrets from the command line.

Configuration comes from the environment (see tss.config).

Usage:
    tss get 42                          # Print a secret as JSON
    tss get 42 --field-value password   # Print a single field value
    tss search "web server" --field Machine
    tss template 6007                   # Print a secret template
    tss generate-password 6007 password
    tss delete 42
    tss version
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import httpx

from tss.errors import TSSError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tss",
        description="tss — command line client for Delinea Secret Server.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # get
    get_parser = subparsers.add_parser("get", help="Get a secret by ID")
    get_parser.add_argument("secret_id", type=int, help="Secret ID")
    get_parser.add_argument("--field-value", metavar="NAME", help="Print only this field's value")

    # search
    search_parser = subparsers.add_parser("search", help="Search secrets")
    search_parser.add_argument("text", help="Search text")
    search_parser.add_argument("--field", default="", help="Exact match on this field")

    # template
    template_parser = subparsers.add_parser("template", help="Get a secret template by ID")
    template_parser.add_argument("template_id", type=int, help="Template ID")

    # generate-password
    gen_parser = subparsers.add_parser(
        "generate-password", help="Generate a password for a template field"
    )
    gen_parser.add_argument("template_id", type=int, help="Template ID")
    gen_parser.add_argument("slug", help="Field slug")

    # delete
    delete_parser = subparsers.add_parser("delete", help="Delete a secret by ID")
    delete_parser.add_argument("secret_id", type=int, help="Secret ID")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from tss import __version__

        print(f"tss {__version__}")
        return 0

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        return _dispatch(args)
    except (TSSError, httpx.HTTPError) as e:
        print(f"Error: {e}")
        return 1


def _dispatch(args: argparse.Namespace) -> int:
    from tss.server import Server

    with Server.from_env() as server:
        if args.command == "get":
            return _cmd_get(server, args)
        elif args.command == "search":
            secrets = server.secrets(args.text, args.field)
            _print_json([s.model_dump(by_alias=True, exclude={"ssh_key_args"}) for s in secrets])
            return 0
        elif args.command == "template":
            template = server.secret_template(args.template_id)
            _print_json(template.model_dump(by_alias=True))
            return 0
        elif args.command == "generate-password":
            template = server.secret_template(args.template_id)
            print(server.generate_password(args.slug, template))
            return 0
        elif args.command == "delete":
            server.delete_secret(args.secret_id)
            print(f"Deleted secret {args.secret_id}")
            return 0
    return 1


def _cmd_get(server, args: argparse.Namespace) -> int:
    secret = server.secret(args.secret_id)
    if args.field_value:
        value, found = secret.field(args.field_value)
        if not found:
            print(f"Error: secret {args.secret_id} has no field '{args.field_value}'")
            return 1
        print(value)
        return 0
    _print_json(secret.model_dump(by_alias=True, exclude={"ssh_key_args"}))
    return 0


def _print_json(data) -> None:
    json.dump(data, sys.stdout, indent=2)
    print()
