#!/usr/bin/env python3
"""
Print a snapshot of the catalog as the client sees it.
Usage: python catalog_snapshot.py [--search TERM] [--movie ID] [--email E --password P]
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).resolve().parent.parent / "src"))

from core.coordinator import create_coordinator
from core.view_models import Notification, ViewState
from utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def print_view(view: ViewState) -> None:
    print(f"Movies ({len(view.movies)}):")
    for movie in view.movies:
        print(f"  [{movie.id}] {movie.title} ({movie.year})")

    print(f"Screenings ({len(view.screenings)}):")
    for screening in view.screenings:
        print(f"  {screening.display_info}")

    if view.visibility and view.visibility.user_info:
        admin = "admin" if view.visibility.add_movie_button else "user"
        print(f"Logged in as {view.visibility.logged_in_as} ({admin})")


def print_message(notification: Notification) -> None:
    print(f"[{notification.level.value}] {notification.title}: {notification.message}")


async def run(args: argparse.Namespace) -> int:
    coordinator = create_coordinator()
    coordinator.on_message(print_message)
    try:
        await coordinator.initialize()

        if args.email:
            if not await coordinator.login(args.email, args.password or ""):
                return 1

        if args.search:
            coordinator.search(args.search)
        if args.movie:
            coordinator.select_screening_filter(args.movie)

        print_view(coordinator.view)
        return 0
    finally:
        await coordinator.aclose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Print the catalog as the client sees it")
    parser.add_argument("--search", help="Filter movies by title, description or year")
    parser.add_argument("--movie", type=int, help="Only show screenings of this movie id")
    parser.add_argument("--email", help="Log in with this email address first")
    parser.add_argument("--password", help="Password for --email")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    configure_logging(level=args.log_level, fmt="text")
    logger.info("Fetching catalog snapshot")
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
