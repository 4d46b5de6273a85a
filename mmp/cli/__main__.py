"""Module entry point for `python -m mmp.cli`."""

if __name__ == "__main__":  # pragma: no cover (invocation driven)
    from mmp.cli import cli

    cli()
