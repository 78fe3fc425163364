"""Object storage for verification documents and diplomas.

Rows only ever hold the storage *path* (``educator12/diploma-1700000000000.pdf``);
readable URLs are produced on demand with ``get_signed_url``.
"""
import os
from werkzeug.utils import secure_filename
from flask import current_app
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
import boto3
from botocore.client import Config

from .errors import DependencyError, NotFoundError

_SIGNER_SALT = 'neurocare-files'


def _ensure_local_dir():
    d = current_app.config['LOCAL_STORAGE_DIR']
    os.makedirs(d, exist_ok=True)
    return d


def _local_path(path):
    root = os.path.abspath(_ensure_local_dir())
    full = os.path.abspath(os.path.join(root, path))
    # keys never escape the storage root
    if not full.startswith(root + os.sep):
        raise NotFoundError('File', path)
    return full


def _s3_client():
    # endpoint_url may be empty in AWS-managed S3
    s3_kwargs = {}
    endpoint = current_app.config.get('S3_ENDPOINT')
    if endpoint:
        s3_kwargs['endpoint_url'] = endpoint
    region = current_app.config.get('S3_REGION')
    if region:
        s3_kwargs['region_name'] = region
    s3_config = Config(signature_version='s3v4', s3={'addressing_style': 'virtual'})
    return boto3.client(
        's3',
        aws_access_key_id=current_app.config.get('S3_ACCESS_KEY'),
        aws_secret_access_key=current_app.config.get('S3_SECRET_KEY'),
        config=s3_config,
        **s3_kwargs,
    )


def _backend():
    return current_app.config.get('STORAGE_BACKEND', 'local')


def build_path(prefix, stem, filename, stamp):
    """Build a storage key such as ``educator12/diploma-1700000000000.pdf``."""
    ext = os.path.splitext(secure_filename(filename or ''))[1].lower() or '.bin'
    return f"{prefix}/{stem}-{int(stamp * 1000)}{ext}"


def upload(path, file_storage):
    """Store ``file_storage`` under ``path`` and return the path."""
    stream = getattr(file_storage, 'stream', file_storage)
    if hasattr(stream, "seek"):
        stream.seek(0)

    if _backend() == 's3':
        bucket = current_app.config.get('S3_BUCKET')
        extra = {}
        content_type = getattr(file_storage, 'mimetype', None)
        if content_type:
            extra['ExtraArgs'] = {'ContentType': content_type}
        try:
            _s3_client().upload_fileobj(stream, bucket, path, **extra)
        except Exception as e:
            current_app.logger.exception('S3 upload failed for %s', path)
            raise DependencyError('storage', 'upload failed', cause=e)
        return path

    full = _local_path(path)
    os.makedirs(os.path.dirname(full), exist_ok=True)
    if hasattr(file_storage, 'save'):
        file_storage.save(full)
    else:
        with open(full, 'wb') as f:
            f.write(stream.read())
    return path


def remove(path):
    """Delete a stored object; missing objects are ignored."""
    if not path:
        return
    if _backend() == 's3':
        try:
            _s3_client().delete_object(Bucket=current_app.config.get('S3_BUCKET'), Key=path)
        except Exception:
            current_app.logger.exception('S3 delete failed for %s', path)
        return
    try:
        os.remove(_local_path(path))
    except FileNotFoundError:
        pass


def get_signed_url(path, ttl=None):
    ttl = int(ttl or current_app.config.get('SIGNED_URL_TTL', 3600))
    if _backend() == 's3':
        try:
            return _s3_client().generate_presigned_url(
                'get_object',
                Params={'Bucket': current_app.config.get('S3_BUCKET'), 'Key': path},
                ExpiresIn=ttl,
            )
        except Exception as e:
            current_app.logger.exception('S3 presign failed for %s', path)
            raise DependencyError('storage', 'signed url generation failed', cause=e)

    token = _signer().dumps({'p': path, 'ttl': ttl})
    base = current_app.config.get('APP_URL', '').rstrip('/')
    return f"{base}/files/{token}"


def resolve_signed_token(token):
    """Return the storage path behind a local signed token, or None if invalid/expired."""
    signer = _signer()
    try:
        payload = signer.loads(token)
        signer.loads(token, max_age=int(payload['ttl']))
    except (BadSignature, SignatureExpired, KeyError, TypeError, ValueError):
        return None
    return payload['p']


def local_file_path(path):
    return _local_path(path)


def download_bytes(path) -> bytes:
    if _backend() == 's3':
        obj = _s3_client().get_object(Bucket=current_app.config['S3_BUCKET'], Key=path)
        return obj['Body'].read()
    with open(_local_path(path), 'rb') as f:
        return f.read()


def _signer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=_SIGNER_SALT)
