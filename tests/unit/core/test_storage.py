"""Tests for S3 upload handling."""

import re
from io import BytesIO
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from starlette.datastructures import Headers, UploadFile

from core.storage.s3 import FileType, S3Storage, build_object_key


def mock_s3_session():
    """aioboto3.Session double whose client is an async context manager."""
    client = AsyncMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    session = MagicMock()
    session.client.return_value = client
    return session, client


class TestObjectKeys:

    @pytest.mark.parametrize(
        "file_type,filename,expected",
        [
            (FileType.AVATAR, "me.PNG", "Public/users/u1/avatar.png"),
            (FileType.SECONDARY_AVATAR, "x.jpg", "Public/users/u1/secondary-avatar.jpg"),
            (FileType.BANNER, "wide.webp", "Public/users/u1/banner.webp"),
            (FileType.RESUME, "cv.docx", "Public/users/u1/resume.docx"),
            (FileType.APPLICATION_LETTER, None, "Public/users/u1/application-letter.pdf"),
        ],
    )
    def test_fixed_keys(self, file_type, filename, expected):
        assert build_object_key("u1", file_type, filename) == expected

    def test_certification_keys_are_unique(self):
        first = build_object_key("u1", FileType.CERTIFICATION, "cert.pdf")
        second = build_object_key("u1", FileType.CERTIFICATION, "cert.pdf")
        assert first != second
        assert re.fullmatch(r"Public/users/u1/certifications/\d+-[0-9a-f]{8}\.pdf", first)


class TestS3Storage:

    def test_missing_bucket(self):
        with patch("core.storage.s3.settings") as mock_settings:
            mock_settings.aws_s3_bucket = ""
            with pytest.raises(ValueError, match="bucket name"):
                S3Storage()

    def test_public_url_variants(self):
        assert (
            S3Storage(bucket_name="b", public_base_url="https://cdn.test/").public_url("k")
            == "https://cdn.test/k"
        )
        assert (
            S3Storage(bucket_name="b", endpoint_url="http://minio:9000").public_url("k")
            == "http://minio:9000/b/k"
        )

    @pytest.mark.asyncio
    async def test_upload_file(self):
        session, client = mock_s3_session()
        upload = UploadFile(
            file=BytesIO(b"image-bytes"),
            filename="face.png",
            headers=Headers({"content-type": "image/png"}),
        )

        with patch("core.storage.s3.aioboto3.Session", return_value=session):
            storage = S3Storage(bucket_name="test-bucket", public_base_url="https://cdn.test")
            result = await storage.upload_file(upload, "user-1", FileType.AVATAR)

        assert result == {
            "success": True,
            "s3Key": "Public/users/user-1/avatar.png",
            "publicUrl": "https://cdn.test/Public/users/user-1/avatar.png",
            "originalName": "face.png",
        }
        client.put_object.assert_awaited_once()
        kwargs = client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "test-bucket"
        assert kwargs["Body"] == b"image-bytes"
        assert kwargs["ContentType"] == "image/png"
        assert kwargs["Metadata"] == {"owner-id": "user-1", "file-type": "avatar"}

    @pytest.mark.asyncio
    async def test_upload_errors_propagate(self):
        session, client = mock_s3_session()
        client.put_object.side_effect = RuntimeError("S3 down")
        upload = UploadFile(file=BytesIO(b"x"), filename="cv.pdf")

        with patch("core.storage.s3.aioboto3.Session", return_value=session):
            storage = S3Storage(bucket_name="test-bucket")
            with pytest.raises(RuntimeError, match="S3 down"):
                await storage.upload_file(upload, "user-1", FileType.RESUME)

    @pytest.mark.asyncio
    async def test_delete(self):
        session, client = mock_s3_session()
        with patch("core.storage.s3.aioboto3.Session", return_value=session):
            assert await S3Storage(bucket_name="b").delete("some/key") is True
        client.delete_object.assert_awaited_once_with(Bucket="b", Key="some/key")
