"""
Blob storage for uploaded certificates and signatures

The workflow only keeps the URL returned by store(); the bytes live either on
the local filesystem or in an S3 bucket.
"""

import io
import mimetypes
import os
import uuid
from typing import Optional, Tuple
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename
from clearflow.utils.exceptions import FileUploadError, NotFoundError
from clearflow.utils.helpers import ensure_directory_exists, log_error, log_info

LOCAL_URL_PREFIX = '/api/documents/'
IMAGE_CONTENT_TYPES = {'image/jpeg', 'image/png', 'image/jpg'}


def _new_key(content_type: str) -> str:
    extension = mimetypes.guess_extension(content_type or '') or '.bin'
    if extension == '.jpe':
        extension = '.jpg'
    return f"{uuid.uuid4().hex}{extension}"


def compress_image(data: bytes, max_size=(1600, 1600), quality=85) -> Tuple[bytes, str]:
    """
    Downscale and re-encode an uploaded image as JPEG

    Returns the smaller of the original and compressed bytes with its content type.
    """
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError):
        raise FileUploadError("Uploaded file is not a readable image")

    original_type = Image.MIME.get(img.format, 'image/jpeg')

    # Convert to RGB if necessary (for JPEG compatibility)
    if img.mode in ('RGBA', 'LA', 'P'):
        img = img.convert('RGB')

    img.thumbnail(max_size, Image.Resampling.LANCZOS)

    output = io.BytesIO()
    img.save(output, format='JPEG', quality=quality, optimize=True)
    compressed = output.getvalue()

    if len(compressed) < len(data):
        return compressed, 'image/jpeg'
    return data, original_type


class LocalBlobStore:
    """Blobs as files under UPLOAD_FOLDER, served back by the documents blueprint"""

    def __init__(self, root: str):
        self.root = root

    def store(self, data: bytes, content_type: str) -> str:
        ensure_directory_exists(self.root)
        key = _new_key(content_type)
        with open(os.path.join(self.root, key), 'wb') as fh:
            fh.write(data)
        log_info(f"Stored blob {key} ({len(data)} bytes) locally")
        return f"{LOCAL_URL_PREFIX}{key}"

    def fetch(self, url: str) -> bytes:
        path = self.path_for(self.key_from_url(url))
        if not os.path.isfile(path):
            raise NotFoundError("Document not found")
        with open(path, 'rb') as fh:
            return fh.read()

    def path_for(self, key: str) -> str:
        safe_key = secure_filename(key)
        if not safe_key or safe_key != key:
            raise NotFoundError("Document not found")
        return os.path.join(self.root, safe_key)

    @staticmethod
    def key_from_url(url: str) -> str:
        if not url or not url.startswith(LOCAL_URL_PREFIX):
            raise NotFoundError("Document not found")
        return url[len(LOCAL_URL_PREFIX):]


class S3BlobStore:
    """Blobs in an S3 bucket, addressed by their public object URL"""

    def __init__(self, bucket: str, client=None, region: Optional[str] = None,
                 access_key: Optional[str] = None, secret_key: Optional[str] = None):
        if not bucket:
            raise FileUploadError("S3 bucket is not configured")
        self.bucket = bucket
        self.client = client or boto3.client(
            's3',
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region
        )

    def store(self, data: bytes, content_type: str) -> str:
        key = f"documents/{_new_key(content_type)}"
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            log_error("S3 upload error", e)
            raise FileUploadError("Could not store the uploaded document")
        log_info(f"Stored blob {key} ({len(data)} bytes) in S3")
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def fetch(self, url: str) -> bytes:
        prefix = f"https://{self.bucket}.s3.amazonaws.com/"
        if not url or not url.startswith(prefix):
            raise NotFoundError("Document not found")
        key = url[len(prefix):]
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('NoSuchKey', '404'):
                raise NotFoundError("Document not found")
            log_error("S3 download error", e)
            raise FileUploadError("Could not read the stored document")
        return response['Body'].read()


def get_blob_store():
    """Blob store selected by BLOB_BACKEND"""
    backend = current_app.config.get('BLOB_BACKEND', 'local')
    if backend == 's3':
        return S3BlobStore(
            current_app.config.get('S3_BUCKET_NAME'),
            region=current_app.config.get('AWS_REGION'),
            access_key=current_app.config.get('AWS_ACCESS_KEY_ID'),
            secret_key=current_app.config.get('AWS_SECRET_ACCESS_KEY')
        )
    root = current_app.config.get('UPLOAD_FOLDER', 'uploads/documents')
    if not os.path.isabs(root):
        root = os.path.join(current_app.instance_path, root)
    return LocalBlobStore(root)


def prepare_upload(data: bytes, content_type: str) -> Tuple[bytes, str]:
    """Normalise an upload before storage; images are compressed, PDFs pass through"""
    if not data:
        raise FileUploadError("No file provided")
    if content_type in IMAGE_CONTENT_TYPES:
        return compress_image(data)
    if content_type == 'application/pdf':
        if not data.startswith(b'%PDF'):
            raise FileUploadError("Uploaded file is not a valid PDF")
        return data, content_type
    raise FileUploadError("Only PNG, JPEG and PDF documents are allowed")
