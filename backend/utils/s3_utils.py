import boto3
from botocore.exceptions import ClientError
from typing import Optional
from urllib.parse import quote
import os
import logging
import uuid

logger = logging.getLogger(__name__)

# --- Reusable S3 Client ---
S3_CLIENT = None
AWS_REGION = os.getenv('AWS_DEFAULT_REGION', 'sa-east-1')
# Bucket receiving generated catalogs and product sheets
S3_BUCKET_NAME = os.getenv('S3_BUCKET_NAME', '')
# Bucket holding link images
S3_IMAGES_BUCKET = os.getenv('S3_IMAGES_BUCKET', 'tissue-images')
# Optional public base (CDN or storage gateway) for link images
S3_PUBLIC_BASE_URL = os.getenv('S3_PUBLIC_BASE_URL', '')


def get_s3_client():
    """Initializes and returns a reusable S3 client."""
    global S3_CLIENT
    if S3_CLIENT is None:
        try:
            S3_CLIENT = boto3.client('s3', region_name=AWS_REGION)
            logger.info(f"S3 client initialized for region: {AWS_REGION}")
        except Exception:
            logger.exception("Failed to create boto3 S3 client")
            raise
    return S3_CLIENT


def resolve_public_url(image_path: Optional[str]) -> Optional[str]:
    """
    Public URL for a stored link image.

    Paths that are already absolute http(s) URLs are returned unchanged.
    """
    if not image_path:
        return None
    image_path = image_path.strip()
    if image_path.startswith(('http://', 'https://')):
        return image_path

    key = quote(image_path.lstrip('/'))
    if S3_PUBLIC_BASE_URL:
        return f"{S3_PUBLIC_BASE_URL.rstrip('/')}/{key}"
    return f"https://{S3_IMAGES_BUCKET}.s3.{AWS_REGION}.amazonaws.com/{key}"


def upload_document_to_s3(file_path: str, prefix: str = 'catalogs', content_type: str = 'application/pdf') -> str:
    """
    Upload a generated document to the documents bucket.

    Args:
        file_path: Local path of the PDF or its HTML companion.
        prefix: Key prefix ("catalogs" or "links").
        content_type: Stored as the object's Content-Type.

    Returns:
        The s3:// path of the uploaded object.
    """
    if not S3_BUCKET_NAME:
        raise RuntimeError("S3_BUCKET_NAME is not configured")

    s3_client = get_s3_client()
    filename = os.path.basename(file_path)
    s3_key = f"{prefix}/{uuid.uuid4().hex}_{filename}"

    try:
        with open(file_path, 'rb') as file_obj:
            s3_client.put_object(
                Bucket=S3_BUCKET_NAME,
                Key=s3_key,
                Body=file_obj,
                ContentType=content_type,
            )
        logger.info(f"Uploaded document {filename} to s3://{S3_BUCKET_NAME}/{s3_key}")
        return f"s3://{S3_BUCKET_NAME}/{s3_key}"
    except ClientError as e:
        logger.exception(f"Failed to upload document to key: {s3_key}")
        raise RuntimeError(f"Could not upload document to S3: {e.response['Error'].get('Message', str(e))}")


def generate_presigned_download_url(s3_path: str, expires_in: int = 3600) -> str:
    """
    Generates a pre-signed URL for downloading a file directly from S3.

    Args:
        s3_path: The full S3 path (e.g., 's3://bucket-name/key').
        expires_in: Time in seconds for the presigned URL to remain valid.

    Returns:
        The presigned URL for downloading the object.
    """
    if not s3_path.startswith(f's3://{S3_BUCKET_NAME}/'):
        raise ValueError(f"Invalid S3 path format. Must start with 's3://{S3_BUCKET_NAME}/'")

    s3_client = get_s3_client()
    s3_key = s3_path.replace(f's3://{S3_BUCKET_NAME}/', '')

    try:
        url = s3_client.generate_presigned_url(
            'get_object',
            Params={'Bucket': S3_BUCKET_NAME, 'Key': s3_key},
            ExpiresIn=expires_in
        )
        logger.info(f"Generated presigned download URL for key: {s3_key}")
        return url
    except ClientError as e:
        logger.exception(f"Failed to generate presigned download URL for key: {s3_key}")
        if e.response['Error']['Code'] == 'NoSuchKey':
            raise FileNotFoundError(f"File not found in S3 at path: {s3_path}")
        raise RuntimeError(f"Could not generate S3 download URL: {e}")
