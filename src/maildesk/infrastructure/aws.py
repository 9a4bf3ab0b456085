"""boto3 client construction shared by the DynamoDB and SES adapters."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import ConnectTimeoutError, ReadTimeoutError

from maildesk.infrastructure.settings import Settings

TIMEOUT_ERRORS = (ConnectTimeoutError, ReadTimeoutError)


def client_config(settings: Settings) -> Config:
    # retries are the caller's decision, so exactly one attempt per call
    return Config(
        region_name=settings.aws_region,
        connect_timeout=settings.connect_timeout_seconds,
        read_timeout=settings.request_timeout_seconds,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )


def aws_client(service: str, settings: Settings) -> Any:
    return boto3.client(
        service,
        endpoint_url=settings.aws_endpoint_url,
        config=client_config(settings),
    )
