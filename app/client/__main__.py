from __future__ import annotations

import argparse

from app.client.view import build_view
from app.core.config import settings
from app.core.log import configure_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Show or edit the stock watchlist.")
    parser.add_argument("--add", metavar="SYMBOL", help="Add a symbol before listing.")
    parser.add_argument("--remove", metavar="SYMBOL", help="Remove a symbol before listing.")
    parser.add_argument("--search", default="", help="Only show symbols containing this text.")
    args = parser.parse_args()

    configure_logging(settings.log_level)
    view = build_view(settings)
    try:
        view.load()
        if args.add:
            view.add(args.add)
        if args.remove:
            view.remove(args.remove.strip().upper())
        view.state.search_term = args.search
        print(view.render())
    finally:
        view.api.close()
    return 1 if view.state.error else 0


if __name__ == "__main__":
    raise SystemExit(main())
