"""Allow ``python -m web_auditor``."""

from .cli import cli

if __name__ == '__main__':
    cli()
