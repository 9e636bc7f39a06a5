import aioboto3
from typing import Any, Dict, Optional
from botocore.config import Config as BotoConfig
from app.shared.core.config import get_settings

# Mapping CamelCase to snake_case for aioboto3/boto3 credentials
AWS_CREDENTIAL_MAPPING = {
    "AccessKeyId": "aws_access_key_id",
    "SecretAccessKey": "aws_secret_access_key",
    "SessionToken": "aws_session_token",
    "aws_access_key_id": "aws_access_key_id",
    "aws_secret_access_key": "aws_secret_access_key",
    "aws_session_token": "aws_session_token",
}


def map_aws_credentials(credentials: Dict[str, str]) -> Dict[str, str]:
    """
    Maps credentials dictionary to valid boto3/aioboto3 kwargs.
    Handles both CamelCase (AWS standard) and snake_case (boto3) keys.
    """
    mapped: Dict[str, str] = {}
    if not credentials:
        return mapped

    for src, dst in AWS_CREDENTIAL_MAPPING.items():
        if src in credentials:
            mapped[dst] = credentials[src]

    return mapped


def build_boto_config() -> BotoConfig:
    """Timeouts from settings; a single attempt per call, failures propagate."""
    settings = get_settings()
    return BotoConfig(
        connect_timeout=settings.AWS_CONNECT_TIMEOUT_SECONDS,
        read_timeout=settings.AWS_READ_TIMEOUT_SECONDS,
        retries={"max_attempts": 1, "mode": "standard"},
    )


class AWSClientFactory:
    """
    Hands out aioboto3 client context managers for a fixed set of credentials.

    Usage:
        async with factory.client("ec2", "eu-west-1") as ec2:
            ...
    """

    def __init__(
        self,
        credentials: Optional[Dict[str, str]] = None,
        session: Optional[aioboto3.Session] = None,
        config: Optional[BotoConfig] = None,
    ) -> None:
        self.credentials = credentials or {}
        self.session = session or aioboto3.Session()
        self.config = config or build_boto_config()

    def client(self, service_name: str, region: str) -> Any:
        kwargs: Dict[str, Any] = {"region_name": region, "config": self.config}
        kwargs.update(map_aws_credentials(self.credentials))
        return self.session.client(service_name, **kwargs)
