"""Allow ``python -m tmuxdev``."""

from .cli.main import main

if __name__ == "__main__":
    main(prog_name="tmuxdev")
