"""Object-storage credential commands."""

import typer

from schemamap.config import get_encryption_service
from schemamap.constants import DEFAULT_AWS_REGION
from schemamap.credentials import (
    delete_aws_credentials,
    get_aws_credentials,
    has_aws_credentials,
    save_aws_credentials,
)
from schemamap.errors import AuthenticationError, ConfigurationMissing, MalformedArtifact
from schemamap.models import AwsCredentials
from schemamap.validation import is_non_empty, is_valid_access_key_id, is_valid_aws_region
from schemamap_cli.output import error_message, show_summary_table, success_message

app = typer.Typer(help="Manage encrypted object-storage credentials")


def mask_secret(secret: str) -> str:
    """Show only the last four characters of a secret."""
    if len(secret) <= 4:
        return "*" * len(secret)
    return "*" * (len(secret) - 4) + secret[-4:]


@app.command("aws")
def credentials_aws(
    access_key_id: str = typer.Option(..., "--access-key-id", prompt="AWS access key id", help="AWS access key id"),
    secret_access_key: str = typer.Option(
        ...,
        "--secret-access-key",
        prompt="AWS secret access key",
        hide_input=True,
        envvar="AWS_SECRET_ACCESS_KEY",
        help="AWS secret access key (prompted if omitted)",
    ),
    region: str = typer.Option(DEFAULT_AWS_REGION, "--region", help="AWS region"),
) -> None:
    """Save AWS credentials, secret key encrypted with the installation key."""
    if not is_valid_access_key_id(access_key_id):
        raise typer.BadParameter("Access key ids are 16-128 uppercase letters and digits", param_hint="--access-key-id")
    if not is_non_empty(secret_access_key):
        raise typer.BadParameter("Secret access key must not be empty", param_hint="--secret-access-key")
    if not is_valid_aws_region(region):
        raise typer.BadParameter(f"Not an AWS region: {region}", param_hint="--region")

    try:
        service = get_encryption_service()
        save_aws_credentials(
            AwsCredentials(access_key_id=access_key_id, secret_access_key=secret_access_key, region=region), service
        )
        success_message("AWS credentials saved")
    except ConfigurationMissing as e:
        error_message(str(e), hint="Run 'schemamap init' first")
        raise typer.Exit(1) from e


@app.command("show")
def credentials_show() -> None:
    """Show saved AWS credentials with the secret masked."""
    try:
        if not has_aws_credentials():
            typer.echo("No AWS credentials saved")
            return
        creds = get_aws_credentials(get_encryption_service())
    except ConfigurationMissing as e:
        error_message(str(e), hint="Run 'schemamap init' first")
        raise typer.Exit(1) from e
    except (AuthenticationError, MalformedArtifact) as e:
        error_message(f"Could not read AWS credentials: {e}", hint="Save them again with 'schemamap credentials aws'")
        raise typer.Exit(1) from e

    show_summary_table(
        "AWS credentials",
        ["Access key id", "Secret access key", "Region"],
        [(creds.access_key_id, mask_secret(creds.secret_access_key), creds.region)],
    )


@app.command("delete")
def credentials_delete(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete saved AWS credentials."""
    if not yes:
        typer.confirm("Delete saved AWS credentials?", abort=True)
    try:
        delete_aws_credentials()
        success_message("AWS credentials deleted")
    except ConfigurationMissing as e:
        error_message(str(e), hint="Run 'schemamap init' first")
        raise typer.Exit(1) from e
    except FileNotFoundError as e:
        error_message(str(e))
        raise typer.Exit(1) from e
