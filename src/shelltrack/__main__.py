"""CLI entry point for shelltrack."""

import sys


def main() -> int:
    """Main entry point for the shelltrack CLI."""
    from shelltrack.cli import run_cli

    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
