"""
S3 service for staging binary originals
"""
import logging
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from ..config import SyncSettings
from ..exceptions import S3Exception


logger = logging.getLogger(__name__)

OFFICE_VIEWER_URL = "https://view.officeapps.live.com/op/view.aspx?src="

# Opened through the Office web viewer
OFFICE_PREVIEW_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}

# Rendered by the browser from the direct URL
BROWSER_PREVIEW_TYPES = {
    "application/pdf",
    "text/plain",
    "text/csv",
    "application/xml",
    "text/xml",
    "text/html",
}


def generate_preview_url(file_url: str, content_type: Optional[str]) -> str:
    """
    Derive the URL users open from the search result

    Args:
        file_url: Direct object URL
        content_type: MIME type of the object

    Returns:
        str: Office web viewer URL for Office documents, the direct URL otherwise
    """
    if content_type in OFFICE_PREVIEW_TYPES:
        return f"{OFFICE_VIEWER_URL}{quote(file_url, safe='')}"
    if content_type in BROWSER_PREVIEW_TYPES:
        return file_url
    # Everything else downloads
    return file_url


class S3Service:
    """Service for AWS S3 operations"""

    def __init__(self, settings: SyncSettings, s3_client=None):
        """
        Initialize S3 service

        Args:
            settings: Sync settings with the bucket and credentials
            s3_client: Optional preconfigured boto3 client

        Raises:
            S3Exception: If initialization fails
        """
        if not settings.s3_bucket_name:
            raise S3Exception("S3 bucket name is not configured")

        self.bucket_name = settings.s3_bucket_name
        self.region = settings.aws_region
        self.key_prefix = settings.s3_key_prefix.strip('/')
        self.public_base_url = settings.s3_public_base_url
        self.endpoint_url = settings.s3_endpoint_url

        try:
            # boto3 will still use env/instance profile if keys are None
            self.s3_client = s3_client or boto3.client(
                's3',
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
                region_name=settings.aws_region,
                endpoint_url=settings.s3_endpoint_url
            )
            logger.info(f" S3Service initialized: bucket={self.bucket_name}, region={self.region}")
        except (BotoCoreError, ValueError) as e:
            raise S3Exception("Unexpected error initializing S3 service", original_error=e)

    def check_connection(self) -> bool:
        """
        Check that the bucket is reachable

        Raises:
            S3Exception: If the bucket cannot be reached
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            return True
        except NoCredentialsError as e:
            raise S3Exception("AWS credentials not found", original_error=e)
        except ClientError as e:
            raise S3Exception(f"Failed to connect to S3 bucket {self.bucket_name}", original_error=e)

    def object_key(self, file_name: str) -> str:
        return f"{self.key_prefix}/{file_name}" if self.key_prefix else file_name

    def object_url(self, s3_key: str) -> str:
        quoted_key = quote(s3_key)
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{quoted_key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{quoted_key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{quoted_key}"

    def upload_file(self, file_content: bytes, file_name: str, content_type: Optional[str]) -> str:
        """
        Upload a binary original and return its preview URL

        Args:
            file_content: Raw bytes
            file_name: Object name, placed under the configured key prefix
            content_type: MIME type stored with the object

        Returns:
            str: Preview URL for the uploaded object

        Raises:
            S3Exception: If the upload fails
        """
        s3_key = self.object_key(file_name)
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=s3_key,
                Body=file_content,
                ContentType=content_type or "application/octet-stream"
            )
        except (ClientError, BotoCoreError) as e:
            raise S3Exception(f"Failed to upload {s3_key}", original_error=e)

        file_url = self.object_url(s3_key)
        logger.debug(f"Uploaded {len(file_content)} bytes to {s3_key}")
        return generate_preview_url(file_url, content_type)
