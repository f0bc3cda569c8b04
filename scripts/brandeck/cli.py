"""CLI orchestration for the deck generator and service."""

from __future__ import annotations

import argparse
import json
import traceback
from pathlib import Path
from typing import Any, Optional, Sequence

from .api import generate_from_file, generate_from_recipe
from .client import DeckClient
from .dispatch import list_available_slide_methods
from .errors import ConfigValidationError
from .logging_setup import setup_logging
from .recipes import RECIPES
from .settings import Settings, load_settings
from .storage import DeckStore
from .themes import available_brands
from .validation import load_request_file, validate_request


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="brandeck", description="Generate branded PPTX decks from JSON instructions")
    parser.add_argument("--config", default=None, help="Path to a YAML settings file (default: ./brandeck.yaml if present)")
    parser.add_argument("--output-dir", default=None, help="Directory for generated decks (overrides settings)")
    parser.add_argument(
        "--policy",
        default=None,
        choices=["strict", "lenient"],
        help="Dispatch policy for failing instructions (overrides settings)",
    )
    parser.add_argument("--server", default=None, help="Send requests to a running service at this base URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug-level console logging")
    parser.add_argument("--debug", action="store_true", help="Show full traceback for unexpected errors")

    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a deck from a JSON request file")
    gen.add_argument("--request", required=True, help="Path to a {type, config, slides} JSON file")
    gen.add_argument("--download", default=None, help="With --server: download the deck into this directory")

    recipe = sub.add_parser("recipe", help="Generate a deck from a built-in recipe")
    recipe.add_argument("name", choices=sorted(RECIPES), help="Recipe name")
    recipe.add_argument("--type", default="corporate", choices=available_brands(), help="Presentation type (brand)")
    recipe.add_argument("--values", default=None, help="Optional JSON file with recipe values")
    recipe.add_argument("--organisation", default=None, help="Organisation name shown on the slides")

    methods = sub.add_parser("methods", help="List slide methods for a presentation type")
    methods.add_argument("--type", required=True, help="Presentation type (brand)")

    sub.add_parser("list", help="List generated decks (newest first)")

    delete = sub.add_parser("delete", help="Delete a generated deck")
    delete.add_argument("filename")

    cleanup = sub.add_parser("cleanup", help="Delete decks older than N days")
    cleanup.add_argument("--max-age-days", type=float, default=None, help="Age threshold in days (default: settings)")

    serve = sub.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _report(slide_count: int, location: str, warnings: Sequence[str]) -> None:
    print(f"✅ Deck saved to {location} ({slide_count} slides)")
    for warning in warnings:
        print(f"⚠️  {warning}")


def _load_values(path: Optional[str]) -> dict:
    if not path:
        return {}
    data = load_request_file(Path(path))
    if not isinstance(data, dict):
        raise ConfigValidationError([f"{path}: recipe values must be a JSON object"])
    return data


def _run_remote(args: argparse.Namespace) -> None:
    client = DeckClient(args.server)
    if args.command == "generate":
        result = client.generate(validate_request(load_request_file(Path(args.request))))
        location = f"{args.server}{result.get('downloadUrl', '')}"
        if args.download:
            location = str(client.download(result["filename"], Path(args.download)))
        _report(result.get("slideCount", 0), location, result.get("warnings", []))
    elif args.command == "recipe":
        values = _load_values(args.values)
        if args.organisation:
            values["organisation"] = args.organisation
        result = client.recipe(args.name, presentation_type=args.type, values=values)
        _report(result.get("slideCount", 0), f"{args.server}{result.get('downloadUrl', '')}", result.get("warnings", []))
    elif args.command == "list":
        _print_json(client.list())
    elif args.command == "delete":
        _print_json(client.delete(args.filename))
    elif args.command == "cleanup":
        _print_json(client.cleanup(args.max_age_days))
    elif args.command == "methods":
        templates = client.templates().get("templates", [])
        matches = [t for t in templates if t.get("type") == args.type]
        if not matches:
            raise SystemExit(f"Unknown presentation type: {args.type}")
        for name in matches[0].get("methods", []):
            print(name)
    else:
        raise SystemExit(f"'{args.command}' is not available with --server")


def _run_local(args: argparse.Namespace, settings: Settings) -> None:
    store = DeckStore(settings.output_dir)
    if args.command == "generate":
        result = generate_from_file(Path(args.request), output_dir=settings.output_dir, policy=settings.dispatch_policy)
        _report(result.slide_count, str(result.path), result.warnings)
    elif args.command == "recipe":
        values = _load_values(args.values)
        if args.organisation:
            values["organisation"] = args.organisation
        result = generate_from_recipe(
            args.name,
            output_dir=settings.output_dir,
            presentation_type=args.type,
            values=values,
            policy=settings.dispatch_policy,
        )
        _report(result.slide_count, str(result.path), result.warnings)
    elif args.command == "methods":
        for name in list_available_slide_methods(args.type):
            print(name)
    elif args.command == "list":
        for entry in store.list():
            print(f"{entry.modified:%Y-%m-%d %H:%M}\t{entry.size:>9}\t{entry.filename}")
    elif args.command == "delete":
        store.delete(args.filename)
        print(f"Deleted {args.filename}")
    elif args.command == "cleanup":
        days = settings.max_age_days if args.max_age_days is None else args.max_age_days
        deleted = store.cleanup(days)
        print(f"Deleted {deleted} files older than {days:g} days")
    elif args.command == "serve":
        from .server import serve

        serve(settings)


def run_cli(argv: Optional[Sequence[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            output_dir=args.output_dir,
            dispatch_policy=args.policy,
            host=getattr(args, "host", None),
            port=getattr(args, "port", None),
        )
        setup_logging(verbose=args.verbose, log_dir=settings.log_dir, level=settings.log_level)

        if args.server:
            _run_remote(args)
        else:
            _run_local(args, settings)
    except ConfigValidationError as e:
        raise SystemExit(str(e)) from e
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        raise SystemExit(f"Deck generation failed: {e}") from e


def main() -> None:
    run_cli()
