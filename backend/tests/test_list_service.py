import asyncio
import threading
import unittest
from unittest.mock import MagicMock

from app.core.genres import LIST_LABELS, lists_for_genres
from app.schemas.lists import AddItemRequest, RankedItem
from app.services.list_editor import ManualFrameScheduler
from app.services.list_service import (
    DuplicateListItemError,
    ListNotFoundError,
    ListRegistry,
    build_snapshot_response,
)
from app.services.persistence import DebouncedPersister
from app.services.ranking_math import SectionEnum


def _payload(catalog_id: int, title: str = "Heat", **overrides) -> AddItemRequest:
    return AddItemRequest(catalog_id=catalog_id, title=title, **overrides)


class TestGenreRouting(unittest.TestCase):
    def test_tmdb_genres_fold_onto_lists(self) -> None:
        self.assertEqual(
            lists_for_genres(["Crime", "Mystery", "Drama", "Western"]),
            ["thriller", "drama"],
        )
        self.assertEqual(lists_for_genres(["Fantasy", "Science Fiction"]), ["scifi"])


class TestListRegistry(unittest.TestCase):
    def setUp(self) -> None:
        self.load = MagicMock(return_value=[])
        self.save = MagicMock()
        self.registry = ListRegistry(
            load=self.load,
            persister=DebouncedPersister(save=self.save),
            scheduler_factory=ManualFrameScheduler,
        )

    def test_unknown_list(self) -> None:
        with self.assertRaises(ListNotFoundError):
            self.registry.get_editor("westerns")

    def test_editor_is_loaded_once(self) -> None:
        first = self.registry.get_editor("drama")
        second = self.registry.get_editor("drama")
        self.assertIs(first, second)
        self.load.assert_called_once_with("drama")

    def test_add_mints_unique_id_and_persists(self) -> None:
        item = self.registry.add_item("all-time", _payload(949, image_path="/heat.jpg"))

        self.assertTrue(item.unranked)
        self.assertEqual(len(item.unique_id), 36)
        self.assertNotEqual(item.unique_id, "949")
        self.save.assert_called_once()
        list_id, items = self.save.call_args.args
        self.assertEqual(list_id, "all-time")
        self.assertEqual(items[0]["catalog_id"], 949)

    def test_add_into_top_10(self) -> None:
        self.registry.add_item("all-time", _payload(1, "Alien"))
        item = self.registry.add_item("all-time", _payload(2, "Aliens", section=SectionEnum.TOP_10))

        self.assertFalse(item.unranked)
        snapshot = self.registry.get_editor("all-time").snapshot
        self.assertEqual([i.catalog_id for i in snapshot], [2, 1])

    def test_duplicate_add(self) -> None:
        self.registry.add_item("watchlist", _payload(1))
        with self.assertRaises(DuplicateListItemError):
            self.registry.add_item("watchlist", _payload(1))

    def test_add_to_genre_lists_skips_lists_already_holding_it(self) -> None:
        self.registry.add_item("thriller", _payload(5, "Se7en"))
        added = self.registry.add_to_genre_lists(_payload(5, "Se7en"), ["Crime", "Drama"])
        self.assertEqual(added, ["drama"])

    def test_remove_and_undo(self) -> None:
        item = self.registry.add_item("comedy", _payload(3, "Airplane!"))
        self.registry.add_item("comedy", _payload(4, "Clue"))

        self.registry.remove_item("comedy", item.unique_id)
        restored = self.registry.undo_remove("comedy")

        self.assertEqual(restored.unique_id, item.unique_id)
        snapshot = self.registry.get_editor("comedy").snapshot
        self.assertEqual([i.catalog_id for i in snapshot], [4, 3])

    def test_summaries_cover_every_list(self) -> None:
        self.registry.add_item("drama", _payload(8))
        summaries = {s["list_id"]: s for s in self.registry.list_summaries()}
        self.assertEqual(set(summaries), set(LIST_LABELS))
        self.assertEqual(summaries["drama"]["item_count"], 1)
        self.assertEqual(summaries["scifi"]["label"], "Sci-Fi")


class TestListRegistryAsyncLoad(unittest.IsolatedAsyncioTestCase):
    async def test_load_runs_in_threadpool_once(self) -> None:
        loop_thread = threading.get_ident()
        load_threads: list[int] = []

        def load(list_id: str) -> list[RankedItem]:
            load_threads.append(threading.get_ident())
            return [RankedItem(unique_id="a", catalog_id=1, unranked=False, title="Heat")]

        registry = ListRegistry(load=load, scheduler_factory=ManualFrameScheduler)
        first = await registry.load_editor("thriller")
        second = await registry.load_editor("thriller")

        self.assertIs(first, second)
        self.assertIs(registry.get_editor("thriller"), first)
        self.assertEqual(len(load_threads), 1)
        self.assertNotEqual(load_threads[0], loop_thread)
        self.assertEqual([i.unique_id for i in first.snapshot], ["a"])

    async def test_concurrent_loads_keep_one_editor(self) -> None:
        registry = ListRegistry(load=lambda list_id: [], scheduler_factory=ManualFrameScheduler)
        first, second = await asyncio.gather(
            registry.load_editor("drama"), registry.load_editor("drama"),
        )
        self.assertIs(first, second)

    async def test_unknown_list(self) -> None:
        load = MagicMock()
        registry = ListRegistry(load=load, scheduler_factory=ManualFrameScheduler)
        with self.assertRaises(ListNotFoundError):
            await registry.load_editor("westerns")
        load.assert_not_called()


class TestBuildSnapshotResponse(unittest.TestCase):
    def test_ranks_and_counts(self) -> None:
        items = [
            RankedItem(unique_id="u", catalog_id=1, unranked=True, title="U"),
            RankedItem(unique_id="a", catalog_id=2, unranked=False, title="A"),
        ]
        payload = build_snapshot_response("drama", items)

        self.assertEqual(payload["ranked_count"], 1)
        self.assertEqual(payload["unranked_count"], 1)
        self.assertIsNone(payload["items"][0]["rank"])
        self.assertEqual(payload["items"][0]["section"], SectionEnum.UNRANKED)
        self.assertEqual(payload["items"][1]["rank"], 1)
        self.assertEqual(payload["items"][1]["section"], SectionEnum.TOP_10)
