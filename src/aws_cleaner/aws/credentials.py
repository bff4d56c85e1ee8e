"""Credential validation and the non-production principal guard."""

from __future__ import annotations

import logging
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from .client import create_boto_client

logger = logging.getLogger(__name__)


class CredentialValidationError(Exception):
    """Raised when AWS credentials are missing, invalid or not allowed to clean."""


def validate_credentials(aws_profile: Optional[str] = None, region_name: Optional[str] = None) -> dict[str, str]:
    """Validate AWS credentials with STS.

    Args:
        aws_profile: AWS profile name (optional)
        region_name: AWS region (optional)

    Returns:
        Dictionary with account_id, arn and user_id of the caller

    Raises:
        CredentialValidationError: If the caller identity cannot be resolved
    """
    try:
        sts = create_boto_client("sts", region_name=region_name, profile_name=aws_profile)
        identity = sts.get_caller_identity()
    except (ClientError, BotoCoreError) as e:
        raise CredentialValidationError(f"Could not validate AWS credentials: {e}") from e

    return {
        "account_id": identity["Account"],
        "arn": identity["Arn"],
        "user_id": identity["UserId"],
    }


def principal_name(arn: str) -> str:
    """Extract the principal name from a caller ARN.

    Examples:
        arn:aws:iam::123456789012:user/np-ci -> np-ci
        arn:aws:sts::123456789012:assumed-role/np-cleaner/session -> np-cleaner
    """
    resource = arn.split(":", 5)[-1]
    parts = resource.split("/")
    if len(parts) == 1:
        return parts[0]
    # assumed-role/<role>/<session> and user/<path>/<name> differ in which part names the principal
    if parts[0] == "assumed-role":
        return parts[1]
    return parts[-1]


def ensure_cleanable_principal(identity: dict[str, str], allowed_prefix: Optional[str]) -> None:
    """Refuse to clean unless the caller looks like a non-production principal.

    Args:
        identity: Identity returned by validate_credentials
        allowed_prefix: Required principal name prefix; empty or None disables the check

    Raises:
        CredentialValidationError: If the principal name does not start with the prefix
    """
    name = principal_name(identity["arn"])
    logger.info(f"Performing clean as {name} in account {identity['account_id']}")

    if not allowed_prefix:
        return

    if not name.startswith(allowed_prefix):
        raise CredentialValidationError(
            f"Principal {name} is not allowed to clean; expected a name starting with '{allowed_prefix}'"
        )
