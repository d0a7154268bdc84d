import unittest

from fastapi.testclient import TestClient

from app.deps.lists import get_list_registry
from app.main import app
from app.schemas.lists import RankedItem
from app.services.list_editor import ManualFrameScheduler
from app.services.list_service import ListRegistry


def _stored_items() -> list[RankedItem]:
    return [
        RankedItem(unique_id="a", catalog_id=550, unranked=False, title="Fight Club"),
        RankedItem(unique_id="b", catalog_id=680, unranked=False, title="Pulp Fiction"),
        RankedItem(unique_id="c", catalog_id=13, unranked=False, title="Forrest Gump"),
        RankedItem(unique_id="u", catalog_id=155, unranked=True, title="The Dark Knight"),
    ]


class TestListsApi(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = ListRegistry(
            load=lambda list_id: _stored_items() if list_id == "all-time" else [],
            persister=None,
            scheduler_factory=ManualFrameScheduler,
        )
        app.dependency_overrides[get_list_registry] = lambda: self.registry
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_get_lists(self) -> None:
        response = self.client.get("/lists")
        self.assertEqual(response.status_code, 200)
        payload = {entry["list_id"]: entry for entry in response.json()}
        self.assertEqual(payload["all-time"]["item_count"], 4)
        self.assertEqual(payload["watchlist"]["item_count"], 0)

    def test_get_list_shape(self) -> None:
        response = self.client.get("/lists/all-time")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["ranked_count"], 3)
        self.assertEqual(payload["unranked_count"], 1)
        self.assertEqual(payload["items"][0]["rank"], 1)
        self.assertEqual(payload["items"][0]["section"], "TOP_10")
        self.assertEqual(payload["items"][3]["section"], "UNRANKED")
        self.assertIsNone(payload["items"][3]["rank"])

    def test_unknown_list_returns_envelope(self) -> None:
        response = self.client.get("/lists/westerns")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["error"]["code"], "LIST_NOT_FOUND")

    def test_add_item(self) -> None:
        response = self.client.post(
            "/lists/drama/items",
            json={"catalog_id": 238, "title": "The Godfather", "image_path": "/gf.jpg"},
        )

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertTrue(payload["unranked"])
        self.assertEqual(payload["catalog_id"], 238)
        self.assertTrue(payload["unique_id"])

    def test_add_item_into_section(self) -> None:
        response = self.client.post(
            "/lists/all-time/items",
            json={"catalog_id": 238, "title": "The Godfather", "section": "TOP_10"},
        )
        self.assertEqual(response.status_code, 201)

        listing = self.client.get("/lists/all-time").json()
        self.assertEqual(listing["items"][0]["catalog_id"], 238)
        self.assertEqual(listing["items"][0]["rank"], 1)

    def test_add_duplicate_returns_409(self) -> None:
        response = self.client.post("/lists/all-time/items", json={"catalog_id": 550, "title": "Fight Club"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["detail"]["error"]["code"], "DUPLICATE_LIST_ITEM")

    def test_add_blank_title_returns_422(self) -> None:
        response = self.client.post("/lists/drama/items", json={"catalog_id": 1, "title": "   "})
        self.assertEqual(response.status_code, 422)

    def test_add_to_genre_lists(self) -> None:
        response = self.client.post(
            "/lists/genres/items",
            json={
                "catalog_id": 807,
                "title": "Se7en",
                "attributes": {"genres": ["Crime", "Mystery", "Drama"]},
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"list_ids": ["thriller", "drama"]})

    def test_remove_then_undo(self) -> None:
        response = self.client.delete("/lists/all-time/items/a")
        self.assertEqual(response.status_code, 204)

        response = self.client.post("/lists/all-time/undo")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["unique_id"], "a")

        listing = self.client.get("/lists/all-time").json()
        self.assertEqual([i["unique_id"] for i in listing["items"]], ["b", "c", "u", "a"])

    def test_remove_missing_item(self) -> None:
        response = self.client.delete("/lists/all-time/items/zzz")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["error"]["code"], "LIST_ITEM_NOT_FOUND")

    def test_undo_with_nothing_removed(self) -> None:
        response = self.client.post("/lists/all-time/undo")
        self.assertEqual(response.status_code, 400)

    def test_drag_to_empty_top_10(self) -> None:
        self.client.post("/lists/all-time/drag/start", json={"item_id": "c"})
        response = self.client.post(
            "/lists/all-time/drag/end",
            json={"dragged_id": "c", "target_id": "empty-top-10"},
        )

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["outcome"], "REORDERED")
        self.assertEqual([i["unique_id"] for i in payload["snapshot"]["items"]], ["c", "a", "b", "u"])

    def test_drag_over_hysteresis(self) -> None:
        self.client.post("/lists/all-time/drag/start", json={"item_id": "a"})

        first = self.client.post(
            "/lists/all-time/drag/over",
            json={"dragged_id": "a", "target_id": "u", "timestamp_ms": 1000},
        ).json()
        second = self.client.post(
            "/lists/all-time/drag/over",
            json={"dragged_id": "a", "target_id": "b", "timestamp_ms": 1100},
        ).json()
        third = self.client.post(
            "/lists/all-time/drag/over",
            json={"dragged_id": "a", "target_id": "b", "timestamp_ms": 1350},
        ).json()

        self.assertEqual(first["outcome"], "RECLASSIFIED")
        self.assertEqual(second["outcome"], "REJECTED")
        self.assertEqual(third["outcome"], "RECLASSIFIED")
        self.assertEqual(third["snapshot"]["items"][0]["unique_id"], "a")
        self.assertEqual(third["snapshot"]["items"][0]["rank"], 1)

    def test_drag_cancel(self) -> None:
        self.client.post("/lists/all-time/drag/start", json={"item_id": "a"})
        response = self.client.post("/lists/all-time/drag/cancel")

        self.assertEqual(response.json()["outcome"], "CANCELLED")
        self.assertIsNone(self.registry.get_editor("all-time").gesture)
