# storecast/core/storage_utils.py
import uuid

from storecast.core.config import get_settings
from storecast.core.supabase_client import supabase_admin


def _bucket() -> str:
    return get_settings().STORAGE_BUCKET


def upload_to_storage(path: str, file_bytes: bytes, content_type: str | None = None) -> str:
    """
    Upload raw bytes to Supabase Storage and return a public URL.

    Args:
        path: Full object path inside the bucket.
              Example: "content/<uuid>.mp4"
        file_bytes: File content in bytes.
        content_type: MIME type stored with the object.

    Returns:
        Public URL to the uploaded file.

    Raises:
        Any exception raised by Supabase client if upload fails.
    """
    storage = supabase_admin().storage.from_(_bucket())
    options = {"content-type": content_type} if content_type else {}
    storage.upload(path, file_bytes, options)
    return storage.get_public_url(path)


def delete_from_storage(path: str) -> None:
    """
    Delete a file from Supabase Storage by its object path.

    Example path (relative to bucket):
        'content/<uuid>.mp4'
    """
    # The client expects a list of paths.
    supabase_admin().storage.from_(_bucket()).remove([path])


def extract_path_from_public_url(url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/content/content/a.mp4
        -> 'content/a.mp4'
    """
    marker = f"/storage/v1/object/public/{_bucket()}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    return url[idx + len(marker) :]


def delete_public_url(url: str) -> None:
    """
    Delete a file by its public URL.

    Raises:
        ValueError: if the URL does not point into the content bucket.
    """
    path = extract_path_from_public_url(url)
    if not path:
        raise ValueError(f"URL is not inside bucket '{_bucket()}': {url}")
    delete_from_storage(path)


def generate_object_path(ext: str, folder: str = "content") -> str:
    """
    Generate a random object path using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "mp4")

    Returns:
        A path like "content/<uuid4>.png"
    """
    return f"{folder}/{uuid.uuid4()}.{ext}"
