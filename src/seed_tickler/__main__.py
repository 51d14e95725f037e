"""Main entry point for the seed_tickler package."""
from seed_tickler.cli import cli


def main():
    """Main entry point function."""
    cli()


if __name__ == "__main__":
    main()
