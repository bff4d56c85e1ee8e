"""boto3 session and client construction."""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig

logger = logging.getLogger(__name__)

# botocore's own retry loop would hide throttling from ThrottledExecutor, so
# clients make a single attempt per call.
_CLIENT_CONFIG = BotoConfig(retries={"max_attempts": 1, "mode": "standard"})


def create_session(profile_name: Optional[str] = None, region_name: Optional[str] = None) -> boto3.Session:
    """Create a boto3 session.

    Args:
        profile_name: AWS profile name (optional, default credential chain otherwise)
        region_name: AWS region (optional, profile/environment default otherwise)

    Returns:
        boto3 Session
    """
    return boto3.Session(profile_name=profile_name, region_name=region_name)


def create_boto_client(
    service_name: str,
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
    session: Optional[boto3.Session] = None,
) -> Any:
    """Create a boto3 client for a service.

    Args:
        service_name: AWS service name (e.g., "cloudformation")
        region_name: AWS region (optional)
        profile_name: AWS profile name, ignored when a session is supplied
        session: Existing session to reuse (optional)

    Returns:
        boto3 client
    """
    if session is None:
        session = create_session(profile_name=profile_name, region_name=region_name)
    logger.debug(f"Creating {service_name} client in {region_name or session.region_name}")
    return session.client(service_name, region_name=region_name, config=_CLIENT_CONFIG)
