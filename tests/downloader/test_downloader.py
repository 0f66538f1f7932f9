import io
import tempfile
import unittest
from contextlib import contextmanager
from pathlib import Path

from rmc.backend.downloader.downloader import ImageDownloader
from rmc.backend.fs.naming import filename_for_link, rewrite_gifv
from rmc.backend.fs.storage import FeedStorageManager, FilesystemError
from rmc.backend.net.http import NetworkError
from rmc.shared.download_state import DownloadState
from rmc.shared.filter_engine.models import Author, ImageCandidate


def candidate(link: str, *, feed: str = "pics", image_id: str = "abc") -> ImageCandidate:
    return ImageCandidate(id="p1", image_id=image_id, link=link, feed=feed, author=Author.from_name("me"))


class FakeTransport:
    """Records requested URLs and serves bodies from a dict."""

    def __init__(self, bodies=None, *, fail_with=None, break_after=None) -> None:
        self.bodies = bodies or {}
        self.fail_with = fail_with
        self.break_after = break_after
        self.requested: list[str] = []

    @contextmanager
    def open_stream(self, url: str):
        self.requested.append(url)
        if self.fail_with is not None:
            raise self.fail_with
        body = self.bodies.get(url, b"image-bytes")
        if self.break_after is not None:
            yield _BrokenStream(body[: self.break_after])
        else:
            yield io.BytesIO(body)


class _BrokenStream:
    def __init__(self, head: bytes) -> None:
        self._head = head
        self._sent = False

    def read(self, size: int = -1) -> bytes:
        if not self._sent:
            self._sent = True
            return self._head
        raise ConnectionResetError("connection reset by peer")


class TestNaming(unittest.TestCase):
    def test_gifv_suffix_becomes_mp4(self) -> None:
        self.assertEqual(rewrite_gifv("https://i.imgur.com/abc.gifv"), "https://i.imgur.com/abc.mp4")

    def test_other_links_unchanged(self) -> None:
        self.assertEqual(rewrite_gifv("https://i.imgur.com/abc.gif"), "https://i.imgur.com/abc.gif")
        self.assertEqual(rewrite_gifv("https://i.imgur.com/gifv.png"), "https://i.imgur.com/gifv.png")

    def test_filename_is_final_segment(self) -> None:
        self.assertEqual(filename_for_link("https://i.redd.it/x/y/z.jpeg"), "z.jpeg")

    def test_filename_requires_a_segment(self) -> None:
        with self.assertRaises(ValueError):
            filename_for_link("https://i.imgur.com/")


class DownloaderTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def make_downloader(self, transport: FakeTransport, *, root_folder_only: bool = False) -> ImageDownloader:
        storage = FeedStorageManager(self.root, root_folder_only=root_folder_only)
        storage.ensure_feed_dir("pics")
        return ImageDownloader(storage=storage, open_stream_func=transport.open_stream)


class TestFeedStorageManager(DownloaderTestCase):
    def test_create_file_in_missing_directory_raises_filesystem_error(self) -> None:
        storage = FeedStorageManager(self.root)
        with self.assertRaises(FilesystemError) as ctx:
            storage.create_file(storage.destination("missing", "abc.jpg"))
        self.assertIn("cannot create file", str(ctx.exception))

    def test_create_file_never_truncates(self) -> None:
        storage = FeedStorageManager(self.root, root_folder_only=True)
        path = storage.destination("pics", "abc.jpg")
        path.write_bytes(b"old")

        with self.assertRaises(FileExistsError):
            storage.create_file(path)
        self.assertEqual(path.read_bytes(), b"old")

    def test_create_file_returns_writable_handle(self) -> None:
        storage = FeedStorageManager(self.root)
        storage.ensure_feed_dir("pics")
        with storage.create_file(storage.destination("pics", "abc.jpg")) as out:
            out.write(b"data")
        self.assertEqual((self.root / "pics" / "abc.jpg").read_bytes(), b"data")


class TestImageDownloader(DownloaderTestCase):
    def test_success_writes_body_to_feed_directory(self) -> None:
        transport = FakeTransport({"https://i.imgur.com/abc.jpg": b"\x89PNG-data"})
        outcome = self.make_downloader(transport).download(candidate("https://i.imgur.com/abc.jpg"))

        self.assertEqual(outcome.state, DownloadState.SUCCESS)
        self.assertEqual(outcome.path, self.root / "pics" / "abc.jpg")
        self.assertEqual(outcome.path.read_bytes(), b"\x89PNG-data")
        self.assertEqual(outcome.bytes_written, len(b"\x89PNG-data"))

    def test_root_folder_only_writes_to_root(self) -> None:
        transport = FakeTransport()
        outcome = self.make_downloader(transport, root_folder_only=True).download(
            candidate("https://i.imgur.com/abc.jpg")
        )
        self.assertEqual(outcome.path, self.root / "abc.jpg")
        self.assertTrue((self.root / "abc.jpg").is_file())

    def test_gifv_is_fetched_and_stored_as_mp4(self) -> None:
        transport = FakeTransport()
        outcome = self.make_downloader(transport).download(candidate("https://i.imgur.com/abc.gifv"))

        self.assertEqual(transport.requested, ["https://i.imgur.com/abc.mp4"])
        self.assertEqual(outcome.url, "https://i.imgur.com/abc.mp4")
        self.assertEqual(outcome.path.name, "abc.mp4")
        self.assertTrue((self.root / "pics" / "abc.mp4").is_file())

    def test_existing_file_is_skipped_without_network(self) -> None:
        transport = FakeTransport()
        existing = self.root / "pics" / "abc.jpg"
        existing.write_bytes(b"old")

        outcome = self.make_downloader(transport).download(candidate("https://i.imgur.com/abc.jpg"))

        self.assertEqual(outcome.state, DownloadState.SKIPPED)
        self.assertEqual(transport.requested, [])
        self.assertEqual(existing.read_bytes(), b"old")

    def test_create_failure_is_failed(self) -> None:
        transport = FakeTransport()
        downloader = self.make_downloader(transport)
        # Feed directory was never created.
        outcome = downloader.download(candidate("https://i.imgur.com/abc.jpg", feed="missing"))

        self.assertEqual(outcome.state, DownloadState.FAILED)
        self.assertIn("cannot create file", outcome.error)
        self.assertEqual(transport.requested, [])

    def test_network_failure_is_failed_and_leaves_file(self) -> None:
        transport = FakeTransport(fail_with=NetworkError("HTTP 404", url="u", status_code=404))
        outcome = self.make_downloader(transport).download(candidate("https://i.imgur.com/abc.jpg"))

        self.assertEqual(outcome.state, DownloadState.FAILED)
        self.assertIn("404", outcome.error)
        self.assertTrue((self.root / "pics" / "abc.jpg").exists())

    def test_copy_failure_keeps_partial_file(self) -> None:
        transport = FakeTransport({"https://i.imgur.com/abc.jpg": b"0123456789"}, break_after=4)
        outcome = self.make_downloader(transport).download(candidate("https://i.imgur.com/abc.jpg"))

        self.assertEqual(outcome.state, DownloadState.FAILED)
        self.assertEqual((self.root / "pics" / "abc.jpg").read_bytes(), b"0123")

    def test_unusable_link_is_failed(self) -> None:
        outcome = self.make_downloader(FakeTransport()).download(candidate("https://i.imgur.com/"))
        self.assertEqual(outcome.state, DownloadState.FAILED)


if __name__ == "__main__":
    unittest.main()
