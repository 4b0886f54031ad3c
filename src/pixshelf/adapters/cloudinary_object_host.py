"""Cloudinary-backed binary object host."""

import base64
from dataclasses import dataclass

import cloudinary
import cloudinary.uploader
import cloudinary.utils

from pixshelf.domain.images import StoredObject
from pixshelf.services.images import ObjectHost

_DELETED_RESULTS = {"ok", "not found"}


@dataclass
class CloudinaryObjectHost(ObjectHost):
    """Stores images in Cloudinary and builds transform-on-read URLs."""

    root_folder: str

    @classmethod
    def create(
        cls, cloud_name: str, api_key: str, api_secret: str, root_folder: str
    ) -> "CloudinaryObjectHost":
        """Configure the Cloudinary SDK and return a host for a root folder."""
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )
        return cls(root_folder=root_folder)

    def upload(self, data: bytes, content_type: str, folder_hint: str) -> StoredObject:
        """Upload image bytes, normalized to a bounded JPEG."""
        encoded = base64.b64encode(data).decode("ascii")
        result = cloudinary.uploader.upload(
            f"data:{content_type};base64,{encoded}",
            resource_type="image",
            folder=f"{self.root_folder}/{folder_hint}",
            quality="auto",
            format="jpg",
            transformation=[{"width": 1200, "height": 800, "crop": "limit"}],
        )
        return StoredObject(
            url=str(result["secure_url"]),
            public_id=str(result["public_id"]),
            format=result.get("format"),
            width=result.get("width"),
            height=result.get("height"),
            bytes=result.get("bytes"),
        )

    def derived_url(self, public_id: str, width: int, height: int) -> str:
        """Return a cropped thumbnail URL for a stored image."""
        url, _options = cloudinary.utils.cloudinary_url(
            public_id,
            width=width,
            height=height,
            crop="fill",
            quality="auto",
            format="jpg",
            secure=True,
        )
        return url

    def delete(self, public_id: str) -> None:
        """Destroy a stored image. Raises when Cloudinary reports an error."""
        result = cloudinary.uploader.destroy(public_id, resource_type="image")
        outcome = result.get("result") if isinstance(result, dict) else None
        if outcome not in _DELETED_RESULTS:
            raise RuntimeError(f"Failed to delete Cloudinary asset: {outcome}")
