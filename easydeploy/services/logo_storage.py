#!/usr/bin/env python3
"""
Logo and metadata pinning on nft.storage
"""

import asyncio
import base64
import binascii
import json
import logging
from typing import Dict, List, Optional, Tuple

import aiohttp

from ..common.errors import UpstreamServiceError, ValidationError
from .http import client_session, read_json

logger = logging.getLogger(__name__)

# (filename, payload, content type)
StoredFile = Tuple[str, bytes, str]


def decode_logo(name: Optional[str], image_base64: Optional[str] = None, image_svg: Optional[str] = None) -> StoredFile:
    """Turn the request payload into a named file.

    ``image_base64`` may be a data URL (``data:image/png;base64,...``) or bare
    base64 and is stored as PNG; ``image_svg`` is stored as SVG text.
    """
    stem = name or "logo"
    if image_base64:
        encoded = image_base64.split(",", 1)[1] if "," in image_base64 else image_base64
        try:
            payload = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(f"imageBase64 is not valid base64: {e}") from e
        return f"{stem}.png", payload, "image/png"
    if image_svg:
        return f"{stem}.svg", image_svg.encode("utf-8"), "image/svg+xml"
    raise ValidationError("imageBase64 or imageSvg required")


class LogoStorage:
    def __init__(self, api_key: str, base_url: str = "https://api.nft.storage", timeout_sec: int = 30):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec

    async def store_directory(self, session: aiohttp.ClientSession, files: List[StoredFile]) -> str:
        """Upload files as one directory and return its CID"""
        form = aiohttp.FormData()
        for filename, payload, content_type in files:
            form.add_field("file", payload, filename=filename, content_type=content_type)

        try:
            async with session.post(
                f"{self.base_url}/upload",
                data=form,
                headers={"Authorization": f"Bearer {self.api_key}"},
            ) as response:
                body = await read_json(response, "nft.storage")
        except asyncio.TimeoutError as e:
            raise UpstreamServiceError("nft.storage upload timed out") from e
        except aiohttp.ClientError as e:
            raise UpstreamServiceError(f"nft.storage upload failed: {e}") from e

        if response.status != 200 or not isinstance(body, dict) or not body.get("ok"):
            raise UpstreamServiceError(f"nft.storage upload failed with HTTP {response.status}", details=body)
        value = body.get("value")
        cid = value.get("cid") if isinstance(value, dict) else None
        if not cid:
            raise UpstreamServiceError("nft.storage response has no CID", details=body)
        return cid

    async def upload_logo(
        self,
        name: Optional[str],
        description: Optional[str],
        image_base64: Optional[str] = None,
        image_svg: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> Dict[str, str]:
        image = decode_logo(name, image_base64, image_svg)

        async with client_session(session, self.timeout_sec) as http:
            cid_image = await self.store_directory(http, [image])
            image_uri = f"ipfs://{cid_image}/{image[0]}"

            metadata = {"name": name or "Token Logo", "description": description or "", "image": image_uri}
            meta_file = ("metadata.json", json.dumps(metadata).encode("utf-8"), "application/json")
            cid_meta = await self.store_directory(http, [meta_file])

        logger.info(f"Pinned logo {image_uri} and metadata ipfs://{cid_meta}/metadata.json")
        return {
            "cidImage": cid_image,
            "imageUri": image_uri,
            "cidMeta": cid_meta,
            "metadataUri": f"ipfs://{cid_meta}/metadata.json",
        }
