"""Entry point for the Scores Dash application."""

from __future__ import annotations

import logging

from textual.logging import TextualHandler

from scoresdash.config import load_settings


def configure_logging(level: str) -> None:
    """Send log records to the Textual devtools console."""
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        handlers=[TextualHandler()],
        force=True,
    )


def main() -> None:
    from scoresdash.ui.app import ScoresDashApp

    settings = load_settings()
    configure_logging(settings.log_level)
    app = ScoresDashApp(settings=settings)
    app.run()


if __name__ == "__main__":
    main()
