import tempfile
import unittest
from pathlib import Path

from helpers import write_manifest

from dims_backfill.manifest import ManifestParseError, load_manifest
from dims_backfill.models import ManifestRecord


class TestLoadManifest(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_parses_records_in_file_order(self):
        path = write_manifest(
            self.root / "files.csv",
            [("1", "images/1.jpg", "jpg"), ("2", "images/2.png", "png")],
        )
        records = load_manifest(path)
        self.assertEqual(
            records,
            [
                ManifestRecord("1", "images/1.jpg", "jpg"),
                ManifestRecord("2", "images/2.png", "png"),
            ],
        )

    def test_skips_empty_lines(self):
        path = self.root / "files.csv"
        path.write_text(
            "id,gcloudPath,fileExtension\n\n1,images/1.jpg,jpg\n\n,,\n2,images/2.png,png\n",
            encoding="utf-8",
        )
        self.assertEqual([r.id for r in load_manifest(path)], ["1", "2"])

    def test_extra_columns_are_ignored(self):
        path = write_manifest(
            self.root / "files.csv",
            [("7", "a/7.gif", "gif", "2024-01-01")],
            header=("id", "gcloudPath", "fileExtension", "createdAt"),
        )
        self.assertEqual(load_manifest(path), [ManifestRecord("7", "a/7.gif", "gif")])

    def test_missing_column_yields_empty_values(self):
        path = write_manifest(
            self.root / "files.csv",
            [("1", "images/1.jpg")],
            header=("id", "gcloudPath"),
        )
        with self.assertLogs("dims_backfill", level="WARNING"):
            records = load_manifest(path)
        self.assertEqual(records, [ManifestRecord("1", "images/1.jpg", "")])

    def test_header_only_manifest_is_empty(self):
        path = write_manifest(self.root / "files.csv", [])
        self.assertEqual(load_manifest(path), [])

    def test_zero_byte_manifest_is_empty(self):
        path = self.root / "files.csv"
        path.write_bytes(b"")
        with self.assertLogs("dims_backfill", level="WARNING"):
            self.assertEqual(load_manifest(path), [])

    def test_byte_order_mark_is_tolerated(self):
        path = self.root / "files.csv"
        path.write_bytes(b"\xef\xbb\xbfid,gcloudPath,fileExtension\n1,images/1.jpg,jpg\n")
        self.assertEqual(load_manifest(path)[0].id, "1")

    def test_unterminated_quote_raises(self):
        path = self.root / "files.csv"
        path.write_text('id,gcloudPath,fileExtension\n1,"images/1.jpg,jpg\n', encoding="utf-8")
        with self.assertRaises(ManifestParseError):
            load_manifest(path)

    def test_missing_file_raises(self):
        with self.assertRaises(ManifestParseError):
            load_manifest(self.root / "nope.csv")

    def test_undecodable_file_raises(self):
        path = self.root / "files.csv"
        path.write_bytes(b"id,gcloudPath,fileExtension\n\xff\xfe,images/1.jpg,jpg\n")
        with self.assertRaises(ManifestParseError):
            load_manifest(path)


if __name__ == "__main__":
    unittest.main()
