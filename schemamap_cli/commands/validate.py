"""Mapping file validation commands."""

from pathlib import Path

import typer

from schemamap.artifact import decrypt_password, load_mapping_file_by_path
from schemamap.config import get_encryption_service
from schemamap.constants import MAPPING_FILE_EXTENSION
from schemamap.encryption import EncryptionService
from schemamap.errors import AuthenticationError, ConfigurationMissing, MalformedArtifact
from schemamap_cli.output import error_message, success_message


def validate_mapping_file(mapping_path: Path, service: EncryptionService | None = None) -> bool:
    """Validate a single mapping file.

    Args:
        mapping_path: Path to mapping file
        service: When given, also check that the password decrypts

    Returns:
        True if valid, False otherwise
    """
    try:
        artifact = load_mapping_file_by_path(mapping_path)
        if service is not None:
            decrypt_password(artifact, service)

        success_message(
            f"Valid mapping: {mapping_path.name} ({len(artifact.selected_schemas)} schemas, "
            f"{len(artifact.tables)} tables)"
        )
        return True

    except MalformedArtifact as e:
        error_message(f"Validation failed for {mapping_path.name}:")
        typer.secho(f"  • {e}", fg=typer.colors.RED, err=True)
        return False
    except AuthenticationError as e:
        error_message(
            f"Password in {mapping_path.name} does not decrypt: {e}",
            hint="The mapping was created under a different key",
        )
        return False
    except OSError as e:
        error_message(f"Failed to read {mapping_path.name}: {e}")
        return False


def validate(
    path: Path = typer.Argument(
        ...,
        help="Path to mapping file or directory",
        exists=True,
        resolve_path=True,
    ),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Recursively validate all mappings in directory"),
    check_credentials: bool = typer.Option(
        False, "--check-credentials", help="Also decrypt the stored password with the installation key"
    ),
) -> None:
    """Validate mapping files.

    Examples:
        # Validate single mapping
        schemamap validate ~/.schemamap/mappings/shop.mapping.json

        # Validate all mappings in directory, including their passwords
        schemamap validate ~/.schemamap/mappings --check-credentials
    """
    try:
        service = get_encryption_service() if check_credentials else None
    except ConfigurationMissing as e:
        error_message(str(e), hint="Run 'schemamap init' or drop --check-credentials")
        raise typer.Exit(1) from e

    if path.is_file():
        # Validate single file
        if not validate_mapping_file(path, service):
            raise typer.Exit(1)
        return

    # Validate directory
    pattern = f"**/*{MAPPING_FILE_EXTENSION}" if recursive else f"*{MAPPING_FILE_EXTENSION}"
    mapping_files = sorted(path.glob(pattern))

    if not mapping_files:
        error_message(f"No mapping files found in {path}", hint="Use --recursive to search subdirectories")
        raise typer.Exit(1)

    typer.echo(f"Validating {len(mapping_files)} mapping(s)...\n")

    valid_count = 0
    invalid_count = 0
    for mapping_file in mapping_files:
        if validate_mapping_file(mapping_file, service):
            valid_count += 1
        else:
            invalid_count += 1

    # Summary
    typer.secho("─" * 50, dim=True)
    if invalid_count == 0:
        success_message(f"All {valid_count} mapping(s) are valid")
    else:
        error_message(f"{invalid_count} of {valid_count + invalid_count} mapping(s) failed validation")
        raise typer.Exit(1)
