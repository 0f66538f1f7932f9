import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from rmc.backend.app import create_app


class TestSettingsApi(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name)
        self.app = create_app(self.data_dir)
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_get_returns_defaults(self) -> None:
        resp = self.client.get("/api/settings")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(),
            {
                "output_directory": "downloads",
                "image_limit": 50,
                "page_type": "hot",
                "max_concurrent_downloads": 3,
                "root_folder_only": False,
                "front_page": False,
            },
        )

    def test_put_updates_and_persists(self) -> None:
        resp = self.client.put("/api/settings", json={"page_type": "Top-Week", "image_limit": 20})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["page_type"], "top-week")
        self.assertEqual(resp.json()["image_limit"], 20)

        stored = self.app.state.settings_store.load()
        self.assertEqual(stored.page_type, "top-week")
        self.assertTrue((self.data_dir / "config.json").is_file())

    def test_put_invalid_page_type_is_400(self) -> None:
        resp = self.client.put("/api/settings", json={"page_type": "sideways"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("sideways", resp.json()["detail"])
        self.assertEqual(self.client.get("/api/settings").json()["page_type"], "hot")

    def test_put_out_of_range_values_are_rejected(self) -> None:
        self.assertEqual(self.client.put("/api/settings", json={"image_limit": 500}).status_code, 422)
        self.assertEqual(self.client.put("/api/settings", json={"max_concurrent_downloads": 0}).status_code, 422)


if __name__ == "__main__":
    unittest.main()
