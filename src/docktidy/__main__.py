"""Entry point for docktidy CLI."""

from docktidy.cli import app


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
