from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .errors import SessionError


def build_session(access_key: str = "", secret_key: str = "", region: Optional[str] = None) -> boto3.session.Session:
    """
    Static keys are used only when both are given. Otherwise boto3 resolves
    credentials from the environment, shared config or instance profile.
    """
    session_kwargs = {}
    if region:
        session_kwargs["region_name"] = region
    if access_key and secret_key:
        session_kwargs["aws_access_key_id"] = access_key
        session_kwargs["aws_secret_access_key"] = secret_key
    try:
        return boto3.session.Session(**session_kwargs)
    except (BotoCoreError, ClientError) as e:
        raise SessionError(f"failed to create session: {e}") from e


def build_s3_client(session: boto3.session.Session, proxy: str = "", region: Optional[str] = None):
    config_kwargs = {}
    if region:
        config_kwargs["region_name"] = region
    if proxy:
        config_kwargs["proxies"] = {"http": proxy, "https": proxy}
    try:
        return session.client("s3", config=Config(**config_kwargs))
    except (BotoCoreError, ClientError, ValueError) as e:
        raise SessionError(f"failed to create S3 client: {e}") from e
