import io
import json
import tempfile
import threading
import time
import unittest
from contextlib import contextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.testclient import TestClient

from rmc.backend.downloader.downloader import ImageDownloader
from rmc.backend.fs.storage import FeedStorageManager
from rmc.backend.pipeline.coordinator import Coordinator
from rmc.backend.runs.api import create_runs_router
from rmc.backend.runs.manager import RunManager
from rmc.backend.settings.models import GlobalSettings
from rmc.backend.settings.store import SettingsStore


LISTING = json.dumps(
    {
        "data": {
            "children": [
                {"data": {"id": "p1", "domain": "i.imgur.com", "url": "https://i.imgur.com/abc.jpg"}},
                {"data": {"id": "p2", "domain": "i.imgur.com", "url": "https://i.imgur.com/def.png"}},
            ]
        }
    }
).encode()


@contextmanager
def fake_open_stream(url: str):
    yield io.BytesIO(b"image-bytes")


class TestRunsApi(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name)
        store = SettingsStore(path=self.data_dir / "config.json")
        store.save(GlobalSettings(output_directory=str(self.data_dir / "downloads")))

        # Listing requests block until the test lets them through.
        self.listing_gate = threading.Event()

        def fetch_listing(url: str) -> bytes:
            self.listing_gate.wait(timeout=10)
            return LISTING

        def coordinator_factory(options, **kwargs):
            storage = FeedStorageManager(Path(options.output_directory), root_folder_only=options.root_folder_only)
            return Coordinator(
                options,
                fetch_listing=fetch_listing,
                downloader=ImageDownloader(storage=storage, open_stream_func=fake_open_stream),
                **kwargs,
            )

        self.manager = RunManager(store=store, runs_dir=self.data_dir / "runs", coordinator_factory=coordinator_factory)
        app = FastAPI()
        app.include_router(create_runs_router(manager=self.manager))
        self.app = app

    def tearDown(self) -> None:
        self.listing_gate.set()
        self._tmp.cleanup()

    def wait_for_status(self, client: TestClient, status: str) -> dict:
        deadline = time.monotonic() + 10
        while True:
            body = client.get("/api/runs/current").json()
            if body["status"] == status or time.monotonic() > deadline:
                return body
            time.sleep(0.02)

    def test_current_is_idle_before_any_run(self) -> None:
        with TestClient(self.app) as client:
            resp = client.get("/api/runs/current")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "Idle", "run": None})

    def test_start_conflict_and_completion(self) -> None:
        with TestClient(self.app) as client:
            started = client.post("/api/runs", json={"feeds": ["r/pics"]})
            self.assertEqual(started.status_code, 202)
            run = started.json()
            self.assertEqual(run["feeds"], ["pics"])
            self.assertEqual(run["status"], "Running")

            conflict = client.post("/api/runs", json={"feeds": ["aww"]})
            self.assertEqual(conflict.status_code, 409)
            self.assertIn(run["run_id"], conflict.json()["detail"])

            self.listing_gate.set()
            body = self.wait_for_status(client, "Done")

        self.assertEqual(body["status"], "Done")
        self.assertEqual(body["run"]["run_id"], run["run_id"])
        self.assertEqual(body["run"]["stage"], "ReportingDone")
        self.assertEqual(body["run"]["totals"]["scheduled"], 2)
        self.assertEqual(body["run"]["totals"]["downloaded"], 2)
        self.assertTrue((self.data_dir / "downloads" / "pics" / "def.png").is_file())

    def test_configuration_error_is_400(self) -> None:
        with TestClient(self.app) as client:
            resp = client.post("/api/runs", json={"feeds": []})
            self.assertEqual(resp.status_code, 400)
            self.assertIn("at least one", resp.json()["detail"])
            self.assertEqual(client.get("/api/runs/current").json()["status"], "Idle")


if __name__ == "__main__":
    unittest.main()
