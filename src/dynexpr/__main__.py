"""Allow running the CLI with `python -m dynexpr`."""

from dynexpr import cli


cli.main()
