"""Bucket object listing."""

import logging
from typing import Any

import httpx

from shdw_drive.config import DriveConfig
from shdw_drive.errors import ListFailed, ResponseParseFailed
from shdw_drive.http import error_message, parse_json
from shdw_drive.models import ObjectInfo

logger = logging.getLogger(__name__)

LIST_PATH = "/v1/object/list"


def fetch_entries(
    http_client: httpx.Client,
    config: DriveConfig,
    bucket: str,
    owner: str,
) -> list[Any]:
    """Fetch the raw listing entries ``owner`` holds in ``bucket``.

    Args:
        http_client: httpx client for HTTP requests
        config: Drive configuration
        bucket: Bucket identifier
        owner: Signer identity owning the objects

    Returns:
        The decoded ``objects`` items, in server order.

    Raises:
        ListFailed: If the server returns a non-success status.
        ResponseParseFailed: If the body is not a listing.
    """
    response = http_client.post(
        config.url(LIST_PATH),
        json={"bucket": bucket, "owner": owner},
    )
    if not response.is_success:
        raise ListFailed(
            error_message(response, "Failed to list objects"), response.status_code
        )

    data = parse_json(response)
    if not isinstance(data, dict):
        raise ResponseParseFailed("Listing response is not an object")

    entries = data.get("objects") or []
    if not isinstance(entries, list):
        raise ResponseParseFailed("Listing objects field is not a list")
    logger.debug("Listed %d objects in %s", len(entries), bucket)
    return entries


def list_objects(
    http_client: httpx.Client,
    config: DriveConfig,
    bucket: str,
    owner: str,
) -> list[ObjectInfo]:
    """List the objects ``owner`` holds in ``bucket`` as ObjectInfo.

    Raises:
        ListFailed: If the server returns a non-success status.
        ResponseParseFailed: If the body or any entry is malformed.
    """
    return [
        ObjectInfo.from_response(item)
        for item in fetch_entries(http_client, config, bucket, owner)
    ]
