"""Object store backends that the fetcher downloads from."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import requests

from .config import DEFAULT_HTTP_TIMEOUT

logger = logging.getLogger("dims_backfill")

PUBLIC_GCS_BASE_URL = "https://storage.googleapis.com"
CHUNK_SIZE = 64 * 1024


class ObjectStore:
    """Read-only access to a single bucket."""

    bucket: str

    def download(self, remote_path: str) -> bytes:
        raise NotImplementedError

    def download_to(self, remote_path: str, destination: Path) -> None:
        """Write the object to ``destination``; backends may stream instead."""
        Path(destination).write_bytes(self.download(remote_path))


class GCSObjectStore(ObjectStore):
    """Google Cloud Storage bucket using application-default credentials.

    Run ``gcloud auth application-default login`` (or point
    ``GOOGLE_APPLICATION_CREDENTIALS`` at a key file) before use.
    """

    def __init__(self, bucket: str, client=None) -> None:
        self.bucket = bucket
        self._client = client
        self._bucket = None

    def _get_bucket(self):
        if self._bucket is None:
            if self._client is None:
                from google.cloud import storage

                logger.debug("Creating Cloud Storage client for bucket %s", self.bucket)
                self._client = storage.Client()
            self._bucket = self._client.bucket(self.bucket)
        return self._bucket

    def download(self, remote_path: str) -> bytes:
        blob = self._get_bucket().blob(remote_path)
        return blob.download_as_bytes()

    def download_to(self, remote_path: str, destination: Path) -> None:
        blob = self._get_bucket().blob(remote_path)
        blob.download_to_filename(str(destination))


class HttpObjectStore(ObjectStore):
    """Publicly readable bucket fetched over plain HTTPS."""

    def __init__(
        self,
        bucket: str,
        base_url: str = PUBLIC_GCS_BASE_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, remote_path: str) -> str:
        return f"{self.base_url}/{quote(self.bucket)}/{quote(remote_path.lstrip('/'))}"

    def download(self, remote_path: str) -> bytes:
        url = self.url_for(remote_path)
        resp = self.session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.content

    def download_to(self, remote_path: str, destination: Path) -> None:
        url = self.url_for(remote_path)
        with self.session.get(url, timeout=self.timeout, stream=True) as resp:
            resp.raise_for_status()
            with Path(destination).open("wb") as handle:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    handle.write(chunk)


def create_object_store(
    kind: str,
    bucket: str,
    *,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
) -> ObjectStore:
    kind = kind.lower()
    if kind == "gcs":
        return GCSObjectStore(bucket)
    if kind == "http":
        return HttpObjectStore(bucket, timeout=timeout)
    raise ValueError(f"Unsupported object store type: {kind}")
