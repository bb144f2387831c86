"""S3 storage utilities for user media and documents."""

import time
import uuid
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, BinaryIO, Optional
import logging

import aioboto3
from fastapi import UploadFile

from core.config import settings

logger = logging.getLogger(__name__)


class FileType(str, Enum):
    """Kinds of user uploads; each maps to a fixed object key."""

    AVATAR = "avatar"
    SECONDARY_AVATAR = "secondary-avatar"
    BANNER = "banner"
    RESUME = "resume"
    APPLICATION_LETTER = "application-letter"
    CERTIFICATION = "certifications"


_DEFAULT_EXTENSIONS = {
    FileType.AVATAR: ".jpg",
    FileType.SECONDARY_AVATAR: ".jpg",
    FileType.BANNER: ".jpg",
    FileType.RESUME: ".pdf",
    FileType.APPLICATION_LETTER: ".pdf",
    FileType.CERTIFICATION: ".pdf",
}


def _get_credentials() -> dict:
    """Session arguments from settings; empty keys defer to the boto chain."""
    credentials: dict[str, Any] = {"region_name": settings.aws_region}
    if settings.aws_access_key_id and settings.aws_secret_access_key:
        credentials["aws_access_key_id"] = settings.aws_access_key_id
        credentials["aws_secret_access_key"] = settings.aws_secret_access_key
    return credentials


def build_object_key(owner_id: str, file_type: FileType, filename: Optional[str]) -> str:
    """
    Object key for an upload.

    ``Public/users/<owner>/avatar.png``; certifications get a unique name
    under ``Public/users/<owner>/certifications/``.
    """
    suffix = PurePosixPath(filename or "").suffix.lower() or _DEFAULT_EXTENSIONS[file_type]
    base = f"Public/users/{owner_id}"
    if file_type == FileType.CERTIFICATION:
        unique = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
        return f"{base}/certifications/{unique}{suffix}"
    return f"{base}/{file_type.value}{suffix}"


class S3Storage:
    """S3 storage handler for async operations."""

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
    ):
        """
        Initialize S3 storage.

        Args:
            bucket_name: S3 bucket name (uses settings if not provided)
            endpoint_url: Custom endpoint for S3-compatible stores (MinIO)
            public_base_url: Base URL objects are publicly served from
        """
        self.bucket_name = bucket_name or settings.aws_s3_bucket
        if not self.bucket_name:
            raise ValueError("S3 bucket name not provided and AWS_S3_BUCKET not set")

        self.endpoint_url = endpoint_url or settings.aws_s3_endpoint_url
        self.public_base_url = public_base_url or settings.s3_public_base_url
        self.credentials = _get_credentials()

    def _client(self):
        session = aioboto3.Session(**self.credentials)
        if self.endpoint_url:
            return session.client("s3", endpoint_url=self.endpoint_url)
        return session.client("s3")

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.credentials['region_name']}.amazonaws.com/{key}"

    async def upload(
        self,
        file_data: bytes | BinaryIO,
        key: str,
        content_type: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> str:
        """
        Upload file to S3.

        Args:
            file_data: File data (bytes or file-like object)
            key: S3 object key (path)
            content_type: MIME type of the file
            metadata: Optional metadata dictionary

        Returns:
            S3 object key
        """
        async with self._client() as client:
            upload_args = {
                "Bucket": self.bucket_name,
                "Key": key,
            }

            if content_type:
                upload_args["ContentType"] = content_type

            if metadata:
                upload_args["Metadata"] = metadata

            if isinstance(file_data, bytes):
                upload_args["Body"] = file_data
            else:
                upload_args["Body"] = file_data.read()

            await client.put_object(**upload_args)

            logger.info(f"Uploaded file to S3: {self.bucket_name}/{key}")
            return key

    async def delete(self, key: str) -> bool:
        """Delete file from S3."""
        async with self._client() as client:
            await client.delete_object(Bucket=self.bucket_name, Key=key)

            logger.info(f"Deleted file from S3: {self.bucket_name}/{key}")
            return True

    async def upload_file(
        self, file: UploadFile, owner_id: str, file_type: FileType
    ) -> dict[str, Any]:
        """
        Store a user upload under the owner's folder.

        Returns:
            ``{"success", "s3Key", "publicUrl", "originalName"}``
        """
        key = build_object_key(owner_id, file_type, file.filename)
        body = await file.read()
        await self.upload(
            body,
            key,
            content_type=file.content_type,
            metadata={"owner-id": owner_id, "file-type": file_type.value},
        )
        return {
            "success": True,
            "s3Key": key,
            "publicUrl": self.public_url(key),
            "originalName": file.filename,
        }
