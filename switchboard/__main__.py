"""Allow `python -m switchboard`."""

from switchboard.cli.cli import main

if __name__ == "__main__":
    main()
