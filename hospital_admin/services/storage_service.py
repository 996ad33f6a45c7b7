"""Storage passthrough for document files.

Bytes are handed to the Supabase Storage REST API when SUPABASE_URL and
SUPABASE_SERVICE_KEY are set, otherwise written under instance/uploads/.
Nothing here looks inside a file beyond its extension and size.

Object layout: <bucket>/<folder>/<uuid><ext>, where folder is the owning
person's id (or "general").
"""

import logging
import mimetypes
import os
import uuid

import requests
from flask import current_app

from hospital_admin.errors import RecordNotFound

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic"}
OFFICE_EXTENSIONS = {".pdf", ".doc", ".docx", ".xls", ".xlsx"}
ALLOWED_EXTENSIONS = IMAGE_EXTENSIONS | OFFICE_EXTENSIONS

UPLOAD_TIMEOUT = 30
FETCH_TIMEOUT = 15


def _remote():
    """(base_url, service_key, bucket) when Supabase is configured, else None."""
    cfg = current_app.config
    if not (cfg.get("SUPABASE_URL") and cfg.get("SUPABASE_SERVICE_KEY")):
        return None
    return (
        cfg["SUPABASE_URL"].rstrip("/"),
        cfg["SUPABASE_SERVICE_KEY"],
        cfg.get("SUPABASE_STORAGE_BUCKET") or "documents",
    )


def _object_url(remote, path, public=False):
    base, _, bucket = remote
    scope = "object/public" if public else "object"
    return f"{base}/storage/v1/{scope}/{bucket}/{path}"


def _local_path(path):
    return os.path.join(current_app.instance_path, "uploads", path)


def _size_of(file):
    file.seek(0, os.SEEK_END)
    size = file.tell()
    file.seek(0)
    return size


def validate_file(file):
    """Check an uploaded FileStorage. Returns (ok, error message or None)."""
    if not file or not file.filename:
        return False, "No file selected."

    ext = os.path.splitext(file.filename)[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        return False, f"File type '{ext}' is not allowed. Accepted: images, PDFs and office documents."

    size = _size_of(file)
    if size == 0:
        return False, "File is empty."
    if size > MAX_FILE_SIZE:
        return False, f"File is too large ({size / (1024 * 1024):.1f} MB). Maximum is 10 MB."
    return True, None


def upload_file(file, folder):
    """Store an uploaded file under folder.

    Returns:
        dict with filename, storage_path, content_type, file_size and
        public_url (an absolute Supabase URL, or /uploads/... locally).
    """
    ext = os.path.splitext(file.filename)[1].lower()
    path = f"{folder}/{uuid.uuid4().hex}{ext}"
    data = file.read()
    content_type = (
        file.content_type
        or mimetypes.guess_type(file.filename)[0]
        or "application/octet-stream"
    )

    remote = _remote()
    url = None
    if remote:
        url = _put_remote(remote, path, data, content_type)
    if url is None:
        url = _put_local(path, data)

    return {
        "filename": file.filename,
        "storage_path": path,
        "content_type": content_type,
        "file_size": len(data),
        "public_url": url,
    }


def _put_remote(remote, path, data, content_type):
    """POST the bytes to the bucket. Returns the public URL, or None on failure."""
    try:
        resp = requests.post(
            _object_url(remote, path),
            headers={
                "Authorization": f"Bearer {remote[1]}",
                "Content-Type": content_type,
                "x-upsert": "true",
            },
            data=data,
            timeout=UPLOAD_TIMEOUT,
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Supabase upload of {path} failed, keeping it on local disk: {e}")
        return None

    logger.info(f"Stored {path} in bucket {remote[2]}")
    return _object_url(remote, path, public=True)


def _put_local(path, data):
    target = _local_path(path)
    os.makedirs(os.path.dirname(target), exist_ok=True)
    with open(target, "wb") as f:
        f.write(data)
    logger.info(f"Stored {path} on local disk")
    return f"/uploads/{path}"


def read_file(storage_path):
    """Fetch stored bytes for download.

    Local disk is checked first, since failed remote uploads land there.

    Returns:
        (bytes, content_type)

    Raises:
        RecordNotFound: Nothing stored at storage_path.
    """
    content_type = mimetypes.guess_type(storage_path)[0] or "application/octet-stream"

    target = _local_path(storage_path)
    if os.path.exists(target):
        with open(target, "rb") as f:
            return f.read(), content_type

    remote = _remote()
    if remote:
        try:
            resp = requests.get(
                _object_url(remote, storage_path),
                headers={"Authorization": f"Bearer {remote[1]}"},
                timeout=FETCH_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error(f"Supabase download of {storage_path} failed: {e}")
            raise RecordNotFound("File", storage_path)
        if resp.status_code == 200:
            return resp.content, resp.headers.get("Content-Type", content_type)
        logger.warning(f"Supabase returned {resp.status_code} for {storage_path}")

    raise RecordNotFound("File", storage_path)


def delete_file(storage_path):
    """Remove a stored file. Best effort: failures are logged, not raised."""
    target = _local_path(storage_path)
    if os.path.exists(target):
        try:
            os.remove(target)
        except OSError as e:
            logger.warning(f"Could not delete {target}: {e}")

    remote = _remote()
    if remote:
        try:
            requests.delete(
                _object_url(remote, storage_path),
                headers={"Authorization": f"Bearer {remote[1]}"},
                timeout=FETCH_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.warning(f"Supabase delete of {storage_path} failed: {e}")
