"""Object-storage credential vault (aws.json in the installation directory)."""

import json
import logging

from pydantic import ValidationError

from schemamap.artifact import utc_timestamp
from schemamap.config import ConfigPaths, resolve_config_paths
from schemamap.encryption import EncryptionService
from schemamap.errors import MalformedArtifact
from schemamap.models import AwsCredentials, SavedAwsCredentials

logger = logging.getLogger(__name__)


def save_aws_credentials(
    creds: AwsCredentials, service: EncryptionService, paths: ConfigPaths | None = None
) -> SavedAwsCredentials:
    """Encrypt the secret access key and write the vault file."""
    paths = paths or resolve_config_paths()
    saved = SavedAwsCredentials(
        access_key_id=creds.access_key_id,
        secret_access_key=service.encrypt(creds.secret_access_key),
        region=creds.region,
        created_at=utc_timestamp(),
    )
    paths.aws_credentials_file.parent.mkdir(parents=True, exist_ok=True)
    paths.aws_credentials_file.write_text(saved.model_dump_json(indent=2, by_alias=True) + "\n", encoding="utf-8")
    paths.aws_credentials_file.chmod(0o600)
    logger.info(f"AWS credentials saved to {paths.aws_credentials_file}")
    return saved


def has_aws_credentials(paths: ConfigPaths | None = None) -> bool:
    paths = paths or resolve_config_paths()
    return paths.aws_credentials_file.is_file()


def load_aws_credentials(paths: ConfigPaths | None = None) -> SavedAwsCredentials:
    """Read the vault file without decrypting it.

    Raises:
        FileNotFoundError: If no credentials were saved
        MalformedArtifact: If the file is not a valid vault entry
    """
    paths = paths or resolve_config_paths()
    if not paths.aws_credentials_file.is_file():
        raise FileNotFoundError("AWS credentials not configured")
    try:
        return SavedAwsCredentials.model_validate_json(paths.aws_credentials_file.read_text(encoding="utf-8"))
    except (ValidationError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedArtifact(f"Invalid credentials file {paths.aws_credentials_file}: {e}") from e


def get_aws_credentials(service: EncryptionService, paths: ConfigPaths | None = None) -> AwsCredentials:
    """Load and decrypt the saved credentials.

    Raises:
        AuthenticationError: If the installation key does not match
    """
    saved = load_aws_credentials(paths)
    return AwsCredentials(
        access_key_id=saved.access_key_id,
        secret_access_key=service.decrypt(saved.secret_access_key),
        region=saved.region,
    )


def delete_aws_credentials(paths: ConfigPaths | None = None) -> None:
    paths = paths or resolve_config_paths()
    if not paths.aws_credentials_file.is_file():
        raise FileNotFoundError("AWS credentials not configured")
    paths.aws_credentials_file.unlink()
    logger.info("AWS credentials deleted")
