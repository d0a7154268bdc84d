import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.db.session import get_db
from app.main import app
from app.services.rating_service import InvalidRatingError


class TestRatingsApi(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)
        app.dependency_overrides[get_db] = lambda: iter([object()])

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_put_rating(self) -> None:
        with patch(
            "app.api.ratings.rate_title",
            return_value={
                "catalog_id": "693134",
                "rating": "double_up",
                "updated_at": datetime.now(timezone.utc),
            },
        ) as rate:
            response = self.client.put("/ratings/693134", json={"rating": "double_up"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["rating"], "double_up")
        self.assertEqual(rate.call_args.args[1], "693134")

    def test_put_rating_cleared(self) -> None:
        with patch(
            "app.api.ratings.rate_title",
            return_value={"catalog_id": "693134", "rating": None, "updated_at": None},
        ):
            response = self.client.put("/ratings/693134", json={"rating": "up"})

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["rating"])

    def test_put_unknown_rating_is_422(self) -> None:
        response = self.client.put("/ratings/693134", json={"rating": "meh"})
        self.assertEqual(response.status_code, 422)

    def test_put_rating_maps_service_error(self) -> None:
        with patch("app.api.ratings.rate_title", side_effect=InvalidRatingError("bad")):
            response = self.client.put("/ratings/%20", json={"rating": "up"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"]["code"], "INVALID_RATING")

    def test_summary_shape(self) -> None:
        with patch(
            "app.api.ratings.rating_summary",
            return_value={
                "total": 12,
                "counts": {"double_up": 4, "up": 6, "down": 2},
                "current_title": {"title": "Popcorn Regular", "min": 10},
                "next_title": {"title": "Screen Enthusiast", "min": 50},
                "progress": 5.0,
                "needed": 38,
            },
        ):
            response = self.client.get("/ratings/summary")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["current_title"]["title"], "Popcorn Regular")
        self.assertEqual(payload["needed"], 38)
