"""Authentication helpers for AWS.

This module centralizes creation of the boto3 Redshift Data API client.
Credentials and region come from the standard AWS resolution chain
(environment, ~/.aws/config profiles, instance roles); a named profile
and an explicit region can override it.
"""

import boto3
from botocore.exceptions import BotoCoreError, NoRegionError, ProfileNotFound

from rsmigrate.core.errors import MigrationError


class AuthError(MigrationError):
    """Raised when an AWS session or client cannot be created."""


def _format_auth_error(exc: Exception, profile: str | None) -> str:
    """Return a user-friendly auth error message."""
    if isinstance(exc, ProfileNotFound):
        return (
            f"AWS profile {profile!r} was not found.\n"
            "Configure it with:\n  $ aws configure --profile " + (profile or "<name>")
        )
    if isinstance(exc, NoRegionError):
        return "No AWS region configured. Pass --region or set AWS_REGION."
    return f"AWS authentication failed: {exc}"


def get_client(profile: str | None = None, region: str | None = None):
    """
    Create and return a boto3 `redshift-data` client.

    Args:
        profile: Optional AWS profile name from ~/.aws/config.
        region: Optional region; falls back to the profile/environment.

    Raises:
        AuthError: If the profile or region cannot be resolved.
    """
    try:
        session = boto3.Session(profile_name=profile) if profile else boto3.Session()
        return session.client("redshift-data", region_name=region or None)
    except (ProfileNotFound, NoRegionError) as exc:
        raise AuthError(_format_auth_error(exc, profile)) from exc
    except BotoCoreError as exc:
        raise AuthError(_format_auth_error(exc, profile)) from exc
