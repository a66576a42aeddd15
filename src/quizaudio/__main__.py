"""Entry point for running quizaudio as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the quizaudio CLI application."""
    app()


if __name__ == "__main__":
    main()
