"""Installation lifecycle commands: init and reset."""

import typer

from schemamap.config import ConfigLocation, get_config_paths, initialize_config, remove_config
from schemamap.encryption import EncryptionKey
from schemamap.errors import ConfigurationMissing
from schemamap_cli.output import error_message, success_message, warning_message


def init(
    location: ConfigLocation = typer.Option(
        ConfigLocation.GLOBAL, "--location", "-l", help="Create the config in ./.schemamap (local) or ~ (global)"
    ),
    passphrase_prompt: bool = typer.Option(
        False, "--passphrase-prompt", help="Derive the key from a passphrase instead of generating a random one"
    ),
    force: bool = typer.Option(
        False, "--force", help="Replace an existing key (existing mappings can no longer be decrypted)"
    ),
) -> None:
    """Create the installation key and config directory.

    Examples:
        # Random key in ~/.schemamap
        schemamap init

        # Passphrase-derived key in ./.schemamap
        schemamap init --location local --passphrase-prompt
    """
    try:
        if passphrase_prompt:
            passphrase = typer.prompt("Passphrase", hide_input=True, confirmation_prompt=True)
            if not passphrase.strip():
                raise ValueError("Passphrase must not be empty")
            key = EncryptionKey.from_passphrase(passphrase)
        else:
            key = EncryptionKey.generate()

        if force and get_config_paths(location).key_file.exists():
            warning_message("Replacing the existing key; payloads encrypted with it can no longer be decrypted")

        paths = initialize_config(location, key, force=force)
        success_message(f"Initialized {location.value} configuration at {paths.config_dir}")

    except FileExistsError as e:
        error_message(str(e), hint="Use --force to replace the key (existing mappings become unreadable)")
        raise typer.Exit(1) from e
    except ValueError as e:
        error_message(str(e))
        raise typer.Exit(1) from e
    except OSError as e:
        error_message(f"Failed to initialize configuration: {e}")
        raise typer.Exit(1) from e


def reset(
    location: ConfigLocation = typer.Option(ConfigLocation.GLOBAL, "--location", "-l", help="Which config to remove"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a config directory with its key, mappings, connections and credentials.

    Example:
        schemamap reset --location local --yes
    """
    config_dir = get_config_paths(location).config_dir
    if not yes:
        typer.confirm(f"Delete {config_dir} and everything in it?", abort=True)

    try:
        removed = remove_config(location)
        success_message(f"Removed {removed}")
    except ConfigurationMissing as e:
        error_message(str(e))
        raise typer.Exit(1) from e
    except OSError as e:
        error_message(f"Failed to remove {config_dir}: {e}")
        raise typer.Exit(1) from e
