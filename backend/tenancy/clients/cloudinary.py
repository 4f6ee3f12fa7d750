from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any, Callable, Optional

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryApiError

from ..config import Settings


class CloudinaryError(RuntimeError):
    pass


@dataclass(frozen=True)
class StoredObject:
    url: str
    public_id: str
    raw: dict[str, Any]


class CloudinaryStore:
    """
    Evidence store backed by the Cloudinary SDK.

    Credentials travel with every upload call instead of going through the
    SDK's global cloudinary.config(), so two stores with different accounts
    can live in one process. `uploader` defaults to cloudinary.uploader.upload.
    """

    def __init__(
        self,
        *,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        timeout: float = 60.0,
        uploader: Optional[Callable[..., dict[str, Any]]] = None,
    ) -> None:
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout
        self._uploader = uploader

    @classmethod
    def from_settings(cls, s: Settings, *, uploader: Optional[Callable[..., dict[str, Any]]] = None) -> "CloudinaryStore":
        return cls(
            cloud_name=s.cloudinary_cloud_name,
            api_key=s.cloudinary_api_key,
            api_secret=s.cloudinary_api_secret,
            timeout=s.evidence_upload_timeout_seconds,
            uploader=uploader,
        )

    def enabled(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def upload(
        self,
        data: bytes,
        *,
        file_name: str,
        mime_type: str,
        resource_type: str,
        folder: str,
        public_id: str,
    ) -> StoredObject:
        if not self.enabled():
            raise CloudinaryError("cloudinary credentials not set")

        upload = self._uploader or cloudinary.uploader.upload
        try:
            body = upload(
                io.BytesIO(data),
                folder=folder,
                public_id=public_id,
                resource_type=resource_type,
                filename=file_name,
                cloud_name=self.cloud_name,
                api_key=self.api_key,
                api_secret=self.api_secret,
                timeout=self.timeout,
            )
        except CloudinaryApiError as e:
            raise CloudinaryError(f"cloudinary upload failed: {e}") from e

        secure_url = (body or {}).get("secure_url")
        pid = (body or {}).get("public_id")
        if not secure_url or not pid:
            raise CloudinaryError("Upload failed with no result")
        return StoredObject(url=str(secure_url), public_id=str(pid), raw=dict(body))
