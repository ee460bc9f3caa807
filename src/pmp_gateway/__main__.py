"""Entry point for running pmp_gateway as a module.

This allows the package to be executed as:
    python -m pmp_gateway
"""

from pmp_gateway.cli.main import cli

if __name__ == "__main__":
    cli()
