import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from dims_backfill.storage import (
    GCSObjectStore,
    HttpObjectStore,
    create_object_store,
)


class TestHttpObjectStore(unittest.TestCase):

    def test_downloads_public_object(self):
        session = mock.Mock(spec=requests.Session)
        session.get.return_value.content = b"bytes"
        store = HttpObjectStore("my-bucket", session=session, timeout=5)

        self.assertEqual(store.download("images/1 a.jpg"), b"bytes")
        session.get.assert_called_once_with(
            "https://storage.googleapis.com/my-bucket/images/1%20a.jpg", timeout=5
        )
        session.get.return_value.raise_for_status.assert_called_once_with()

    def test_http_errors_propagate(self):
        session = mock.Mock(spec=requests.Session)
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("404")
        store = HttpObjectStore("my-bucket", session=session)
        with self.assertRaises(requests.HTTPError):
            store.download("missing.png")

    def test_custom_base_url(self):
        store = HttpObjectStore("b", base_url="http://localhost:4443/", session=mock.Mock())
        self.assertEqual(store.url_for("/x/y.png"), "http://localhost:4443/b/x/y.png")

    def test_download_to_streams_into_file(self):
        session = mock.Mock(spec=requests.Session)
        session.get.return_value = mock.MagicMock()
        resp = session.get.return_value.__enter__.return_value
        resp.iter_content.return_value = [b"ab", b"cd"]
        store = HttpObjectStore("my-bucket", session=session, timeout=5)

        with tempfile.TemporaryDirectory() as tmp:
            destination = Path(tmp) / "1.jpg"
            store.download_to("images/1.jpg", destination)
            self.assertEqual(destination.read_bytes(), b"abcd")

        session.get.assert_called_once_with(
            "https://storage.googleapis.com/my-bucket/images/1.jpg", timeout=5, stream=True
        )
        resp.raise_for_status.assert_called_once_with()


class TestGCSObjectStore(unittest.TestCase):

    def test_downloads_blob_bytes(self):
        client = mock.Mock()
        blob = client.bucket.return_value.blob.return_value
        blob.download_as_bytes.return_value = b"data"
        store = GCSObjectStore("my-bucket", client=client)

        self.assertEqual(store.download("images/1.jpg"), b"data")
        self.assertEqual(store.download("images/2.jpg"), b"data")
        client.bucket.assert_called_once_with("my-bucket")
        client.bucket.return_value.blob.assert_any_call("images/2.jpg")

    def test_errors_propagate(self):
        client = mock.Mock()
        client.bucket.return_value.blob.return_value.download_as_bytes.side_effect = RuntimeError("denied")
        store = GCSObjectStore("my-bucket", client=client)
        with self.assertRaises(RuntimeError):
            store.download("images/1.jpg")

    def test_download_to_writes_blob_to_file(self):
        client = mock.Mock()
        blob = client.bucket.return_value.blob.return_value
        store = GCSObjectStore("my-bucket", client=client)

        store.download_to("images/1.jpg", Path("tmp") / "1.jpg")

        client.bucket.return_value.blob.assert_called_once_with("images/1.jpg")
        blob.download_to_filename.assert_called_once_with(str(Path("tmp") / "1.jpg"))
        blob.download_as_bytes.assert_not_called()


class TestCreateObjectStore(unittest.TestCase):

    def test_builds_known_kinds_without_connecting(self):
        self.assertIsInstance(create_object_store("gcs", "b"), GCSObjectStore)
        store = create_object_store("HTTP", "b", timeout=3)
        self.assertIsInstance(store, HttpObjectStore)
        self.assertEqual(store.timeout, 3)

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            create_object_store("s3", "b")


if __name__ == "__main__":
    unittest.main()
