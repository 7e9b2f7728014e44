import os
import uuid

import boto3
from botocore.exceptions import NoCredentialsError
from werkzeug.utils import secure_filename


def _client():
    return boto3.client(
        "s3",
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        region_name=os.getenv("AWS_REGION"),
    )


def file_extension(filename):
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def is_allowed_image(filename, allowed_extensions):
    return file_extension(filename) in allowed_extensions


def build_key(folder, filename):
    """folder/<uuid>_<sanitized name>, unique per upload."""
    return f"{folder}/{uuid.uuid4().hex}_{secure_filename(filename)}"


def upload_file_to_s3(file, key, bucket_name, base_url):
    s3 = _client()
    try:
        s3.upload_fileobj(
            file,
            bucket_name,
            key,
            ExtraArgs={"ACL": "public-read", "ContentType": file.mimetype or "image/jpeg"},
        )
    except NoCredentialsError:
        raise Exception("AWS credentials not found. Check environment variables.")

    return f"{base_url.rstrip('/')}/{key}"


def delete_file_from_s3(key, bucket_name):
    s3 = _client()
    try:
        s3.delete_object(Bucket=bucket_name, Key=key)
    except NoCredentialsError:
        raise Exception("AWS credentials not found. Check environment variables.")
    return True
