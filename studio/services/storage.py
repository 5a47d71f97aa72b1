"""
S3 Storage Service
Uploads, deletes and presigned URLs for profile photos and project documents
"""

import logging
import os
import uuid
from typing import Optional

import boto3
from botocore.config import Config

from ..config import (
    AWS_ACCESS_KEY_ID,
    AWS_REGION,
    AWS_SECRET_ACCESS_KEY,
    S3_BUCKET_NAME,
    S3_ENDPOINT_URL,
)

logger = logging.getLogger(__name__)

# Presigned URL expiration time (1 hour)
PRESIGNED_URL_EXPIRATION = 3600

MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
MAX_DOCUMENT_SIZE = 20 * 1024 * 1024  # 20MB

ALLOWED_IMAGE_TYPES = [
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/gif",
    "image/heic",
    "image/heif",
    "image/avif",
]

ALLOWED_DOCUMENT_TYPES = ALLOWED_IMAGE_TYPES + [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    "text/csv",
]


def get_s3_client():
    """Create and return an S3 client."""
    return boto3.client(
        "s3",
        region_name=AWS_REGION,
        endpoint_url=S3_ENDPOINT_URL or None,
        aws_access_key_id=AWS_ACCESS_KEY_ID,
        aws_secret_access_key=AWS_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def build_key(folder: str, filename: Optional[str]) -> str:
    """Unique object key under `folder`, keeping the original extension"""
    ext = os.path.splitext(filename or "")[1].lower()
    return f"{folder.strip('/')}/{uuid.uuid4()}{ext}"


def upload_bytes(data: bytes, key: str, content_type: str) -> str:
    """Upload raw bytes and return the object key"""
    s3 = get_s3_client()
    try:
        s3.put_object(Bucket=S3_BUCKET_NAME, Key=key, Body=data, ContentType=content_type)
        logger.info(f"✅ Uploaded {key} ({len(data)} bytes)")
        return key
    except Exception as e:
        logger.error(f"❌ Failed to upload {key}: {e}")
        raise


def delete_object(key: str) -> bool:
    """Delete an object. Failures are logged and reported, not raised."""
    if not key:
        return False
    try:
        get_s3_client().delete_object(Bucket=S3_BUCKET_NAME, Key=key)
        logger.info(f"🗑️ Deleted {key}")
        return True
    except Exception as e:
        logger.warning(f"⚠️ Failed to delete {key}: {e}")
        return False


def generate_presigned_url(key: str, expiration: int = PRESIGNED_URL_EXPIRATION) -> Optional[str]:
    """Generate a presigned URL for accessing a private object."""
    if not key:
        return None
    if key.startswith("http://") or key.startswith("https://"):
        return key

    params = {"Bucket": S3_BUCKET_NAME, "Key": key}
    if any(key.lower().endswith(ext) for ext in [".jpg", ".jpeg", ".png", ".webp", ".gif", ".heic", ".heif", ".avif", ".pdf"]):
        params["ResponseContentDisposition"] = "inline"

    try:
        return get_s3_client().generate_presigned_url("get_object", Params=params, ExpiresIn=expiration)
    except Exception as e:
        logger.error(f"❌ Failed to generate presigned URL for key {key}: {e}")
        return None
