"""Tests for the watch history query: stored order and a single nested owner."""

import unittest

from support import USERS_URL, AppTestCase, seed_user, seed_video, set_history

from vidtube.core.errors import NotFoundError
from vidtube.models import User
from vidtube.services.history import get_watch_history


class TestWatchHistoryQuery(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.db = self.session()
        self.viewer = seed_user(self.db, "viewer")
        self.creator_a = seed_user(self.db, "creator_a", fullname="Creator A")
        self.creator_b = seed_user(self.db, "creator_b", fullname="Creator B")
        self.v1 = seed_video(self.db, self.creator_a, "first")
        self.v2 = seed_video(self.db, self.creator_b, "second")
        self.v3 = seed_video(self.db, self.creator_a, "third")

    def tearDown(self) -> None:
        self.db.close()
        super().tearDown()

    def test_returns_videos_in_history_order(self) -> None:
        # deliberately not insertion order of the videos
        set_history(self.db, self.viewer, [self.v3, self.v1, self.v2])
        videos = get_watch_history(self.db, self.viewer.id)
        self.assertEqual([v.title for v in videos], ["third", "first", "second"])

    def test_each_video_has_single_owner_object(self) -> None:
        set_history(self.db, self.viewer, [self.v2, self.v1])
        videos = get_watch_history(self.db, self.viewer.id)
        self.assertEqual(videos[0].owner.username, "creator_b")
        self.assertEqual(videos[0].owner.fullname, "Creator B")
        self.assertEqual(videos[1].owner.id, self.creator_a.id)
        dumped = videos[0].model_dump(by_alias=True)
        self.assertIsInstance(dumped["owner"], dict)
        self.assertEqual(
            set(dumped["owner"]), {"id", "username", "fullname", "avatar"}
        )

    def test_repeated_views_are_kept(self) -> None:
        set_history(self.db, self.viewer, [self.v1, self.v2, self.v1])
        videos = get_watch_history(self.db, self.viewer.id)
        self.assertEqual([v.id for v in videos], [self.v1.id, self.v2.id, self.v1.id])

    def test_empty_history(self) -> None:
        self.assertEqual(get_watch_history(self.db, self.viewer.id), [])

    def test_history_is_per_user(self) -> None:
        set_history(self.db, self.viewer, [self.v1])
        set_history(self.db, self.creator_b, [self.v3, self.v2])
        self.assertEqual(len(get_watch_history(self.db, self.viewer.id)), 1)
        self.assertEqual(
            [v.title for v in get_watch_history(self.db, self.creator_b.id)], ["third", "second"]
        )

    def test_unknown_user_raises_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            get_watch_history(self.db, 9999)


class TestWatchHistoryEndpoint(AppTestCase):
    def test_endpoint_returns_ordered_videos_with_owner(self) -> None:
        tokens = self.register_and_login()
        with self.session() as db:
            alice = db.query(User).filter_by(username="alice").one()
            creator = seed_user(db, "creator")
            a = seed_video(db, creator, "a")
            b = seed_video(db, creator, "b")
            set_history(db, alice, [b, a])

        resp = self.client.get(f"{USERS_URL}/history", headers=self.bearer(tokens["accessToken"]))
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()["data"]
        self.assertEqual([v["title"] for v in data], ["b", "a"])
        for video in data:
            self.assertIsInstance(video["owner"], dict)
            self.assertEqual(video["owner"]["username"], "creator")
            self.assertIn("videoFile", video)

        me = self.client.get(f"{USERS_URL}/current-user", headers=self.bearer(tokens["accessToken"]))
        self.assertEqual(me.json()["data"]["watchHistory"], [data[0]["id"], data[1]["id"]])

    def test_endpoint_requires_auth(self) -> None:
        self.assertEqual(self.client.get(f"{USERS_URL}/history").status_code, 401)


if __name__ == "__main__":
    unittest.main()
