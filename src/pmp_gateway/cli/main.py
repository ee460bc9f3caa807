"""Main CLI entry point for the PMP Gateway client.

This module provides the main Click command group for the pmp-gateway CLI.
"""

from pathlib import Path
from typing import Optional

import click

from pmp_gateway import __version__
from pmp_gateway.cli.report_commands import EXIT_CONFIGURATION_ERROR, report
from pmp_gateway.config import load_config
from pmp_gateway.logging_audit import configure_logging
from pmp_gateway.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="pmp-gateway")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-pii/--no-redact-pii",
    default=None,
    help="Redact patient identifiers (names, birthdates, phones) from logs (overrides config)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_pii: Optional[bool],
) -> None:
    """PMP Gateway client - prescription monitoring reports from the command line.
    
    Looks up a patient through the PMP Gateway and retrieves the rendered
    report using a mutual TLS client certificate.
    
    Common usage:
    
        # Look up a patient and save the report
        pmp-gateway report --first-name Jane --last-name Doe --dob 1970-07-01 \\
            --zip 43215 --output report.html
        
        # Only run the patient lookup and print the report link
        pmp-gateway report --first-name Jane --last-name Doe --dob 1970-07-01 \\
            --zip 43215 --patient-only
        
        # Use custom configuration file
        pmp-gateway --config custom/config.json report ...
    
    Use --help with any command for more information.
    """
    ctx.ensure_object(dict)
    
    try:
        config_obj = load_config(config)
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(EXIT_CONFIGURATION_ERROR)
    
    ctx.obj["config"] = config_obj
    ctx.obj["verbose"] = verbose
    ctx.obj["redact_pii"] = redact_pii
    ctx.obj["log_file"] = log_file
    
    # Precedence: CLI flags > config file > defaults
    log_level = "DEBUG" if verbose else config_obj.logging.level
    log_file_path = log_file if log_file else config_obj.logging.log_file
    redact_pii_setting = (
        redact_pii if redact_pii is not None else config_obj.logging.redact_pii
    )
    
    configure_logging(
        level=log_level, log_file=log_file_path, redact_pii=redact_pii_setting
    )


cli.add_command(report)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.
    
    Args:
        config_file: Path to configuration file to validate
        
    Example:
        pmp-gateway config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)
    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(EXIT_CONFIGURATION_ERROR)
    
    click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
    click.echo(f"\nConfiguration file: {config_file}")
    click.echo(f"\nGateway:")
    click.echo(f"  Base URI:    {config_obj.gateway.base_uri}")
    click.echo(f"  API version: {config_obj.gateway.api_version}")
    click.echo(f"  Namespace:   {config_obj.gateway.namespace}")
    
    click.echo(f"\nCredentials:")
    click.echo(f"  Username:    {config_obj.credentials.username or 'Not configured'}")
    click.echo(f"  Password:    ${config_obj.credentials.password_env_var}")
    
    click.echo(f"\nCertificates:")
    click.echo(f"  PKCS12 file: {config_obj.certificates.pkcs12_path or 'Not configured'}")
    click.echo(f"  Certificate: ${config_obj.certificates.certificate_env_var}")
    click.echo(f"  Password:    ${config_obj.certificates.password_env_var}")
    
    click.echo(f"\nTransport:")
    click.echo(f"  Verify TLS:  {config_obj.transport.verify_tls}")
    
    provider = config_obj.provider
    click.echo(f"\nProvider:")
    if provider is None:
        click.echo("  Not configured (supply --role and provider options)")
    else:
        click.echo(f"  Name:        {provider.first_name} {provider.last_name}")
        click.echo(f"  Role:        {provider.role}")
        click.echo(f"  Location:    {provider.location_name} ({provider.state_code})")
    
    click.echo(f"\nLogging:")
    click.echo(f"  Level:       {config_obj.logging.level}")
    click.echo(f"  Log file:    {config_obj.logging.log_file}")
    click.echo(f"  Redact PII:  {config_obj.logging.redact_pii}")


cli.add_command(config)


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"pmp-gateway version {__version__}")


if __name__ == "__main__":
    cli()
