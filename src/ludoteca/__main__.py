"""Main entry point for the ludoteca package."""

from ludoteca.cli import main


if __name__ == "__main__":
    main()
