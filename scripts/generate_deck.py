"""Generate branded PPTX decks from JSON requests or built-in recipes.

Usage:
    python scripts/generate_deck.py generate --request assets/sample_request.json
    python scripts/generate_deck.py recipe quarterly_review --organisation "Acme Ltd"
    python scripts/generate_deck.py serve --port 3001
"""

from __future__ import annotations

from brandeck.cli import run_cli


def main() -> None:
    run_cli()


if __name__ == "__main__":
    main()
