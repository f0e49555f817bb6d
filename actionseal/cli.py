"""
actionseal CLI — key generation, id derivation, action manifests.

Usage:
    python -m actionseal keygen                       # Print a fresh base64 key
    python -m actionseal derive-id MODULE NAME        # Print a derived action id
    python -m actionseal manifest app.actions ...     # Import modules, print id -> export map
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from typing import List, Optional

from .config import encode_key, generate_key, get_id_salt, get_log_level
from .errors import DuplicateActionError
from .registry import derive_action_id, get_registry


def cmd_keygen(args: argparse.Namespace) -> int:
    print(encode_key(generate_key()))
    return 0


def cmd_derive_id(args: argparse.Namespace) -> int:
    salt = args.salt if args.salt is not None else get_id_salt()
    print(derive_action_id(args.module, args.name, salt))
    return 0


def cmd_manifest(args: argparse.Namespace) -> int:
    for module in args.modules:
        try:
            importlib.import_module(module)
        except ImportError as e:
            print(f"Cannot import {module}: {e}", file=sys.stderr)
            return 1
        except DuplicateActionError as e:
            print(f"Registry conflict while loading {module}: {e}", file=sys.stderr)
            return 1
    print(json.dumps(get_registry().manifest(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="actionseal", description="Sealed action references")
    sub = parser.add_subparsers(dest="cmd", required=True)

    keygen_p = sub.add_parser("keygen", help="Generate a sealing key")
    keygen_p.set_defaults(func=cmd_keygen)

    derive_p = sub.add_parser("derive-id", help="Derive an action id")
    derive_p.add_argument("module")
    derive_p.add_argument("name")
    derive_p.add_argument("--salt")
    derive_p.set_defaults(func=cmd_derive_id)

    manifest_p = sub.add_parser("manifest", help="Print the action manifest")
    manifest_p.add_argument("modules", nargs="+")
    manifest_p.set_defaults(func=cmd_manifest)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=get_log_level(), format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
