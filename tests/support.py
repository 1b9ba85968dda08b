"""Shared fixtures for the test suite: isolated apps on in-memory SQLite and a fake media store."""

import unittest
from typing import Any

from fastapi.testclient import TestClient
from pydantic import SecretStr

from vidtube.core.config import Settings
from vidtube.core.security import hash_password
from vidtube.main import create_app
from vidtube.models import Base, Subscription, User, Video, WatchHistoryEntry
from vidtube.schemas.media import UploadResult
from vidtube.services.media import MediaFile, MediaStorage, MediaUploadError

USERS_URL = "/api/v1/users"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def make_settings(**overrides: Any) -> Settings:
    """Settings for tests: in-memory SQLite, cheap bcrypt, fixed secrets, no .env."""
    values: dict[str, Any] = {
        "APP_ENV": "test",
        "DATABASE_URL": "sqlite://",
        "BCRYPT_ROUNDS": 4,
        "LOG_LEVEL": "WARNING",
        "ACCESS_TOKEN_SECRET": SecretStr("test-access-secret"),
        "REFRESH_TOKEN_SECRET": SecretStr("test-refresh-secret"),
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeMediaStorage(MediaStorage):
    """Records uploads in memory; set fail=True to simulate a backend failure."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: list[tuple[str, MediaFile]] = []

    async def upload(self, file: MediaFile, folder: str) -> UploadResult:
        if self.fail:
            raise MediaUploadError("storage unavailable", 503)
        self.uploads.append((folder, file))
        n = len(self.uploads)
        return UploadResult(
            url=f"https://media.test/{folder}/{n}-{file.filename}",
            public_id=f"{folder}/{n}",
            resource_type="image",
            format=file.extension.lstrip("."),
            bytes=len(file.content),
        )


def image(name: str = "avatar.png") -> tuple[str, bytes, str]:
    return (name, PNG_BYTES, "image/png")


class AppTestCase(unittest.TestCase):
    """Builds a fresh app and schema per test; offers register/login shortcuts."""

    def setUp(self) -> None:
        self.settings = make_settings()
        self.storage = FakeMediaStorage()
        self.app = create_app(self.settings, media_storage=self.storage)
        self.engine = self.app.state.engine
        Base.metadata.create_all(self.engine)
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        self.client.close()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def session(self):
        return self.app.state.session_factory()

    def register(
        self,
        username: str = "alice",
        email: str = "alice@example.com",
        password: str = "s3cret-pass",
        fullname: str = "Alice Liddell",
        avatar: bool = True,
        cover_image: bool = False,
    ):
        files = {}
        if avatar:
            files["avatar"] = image("avatar.png")
        if cover_image:
            files["coverImage"] = image("cover.jpg")
        data = {"username": username, "email": email, "password": password, "fullname": fullname}
        return self.client.post(f"{USERS_URL}/register", data=data, files=files or None)

    def login(self, password: str = "s3cret-pass", **identity: str):
        body = {"password": password, **(identity or {"username": "alice"})}
        return self.client.post(f"{USERS_URL}/login", json=body)

    def register_and_login(self, **kwargs: str) -> dict[str, Any]:
        resp = self.register(**kwargs)
        self.assertEqual(resp.status_code, 201, resp.text)
        username = kwargs.get("username", "alice")
        password = kwargs.get("password", "s3cret-pass")
        resp = self.login(password=password, username=username)
        self.assertEqual(resp.status_code, 200, resp.text)
        # Tests pass tokens explicitly; drop whatever the login response set.
        self.client.cookies.clear()
        return resp.json()["data"]

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


def seed_user(db, username: str, email: str | None = None, fullname: str | None = None) -> User:
    """Insert a user directly (no HTTP round trip) and return it."""
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        fullname=fullname or username.title(),
        password_hash=hash_password("pw", rounds=4),
        avatar=f"https://media.test/avatars/{username}.png",
    )
    db.add(user)
    db.commit()
    return user


def seed_video(db, owner: User, title: str) -> Video:
    video = Video(
        video_file=f"https://media.test/videos/{title}.mp4",
        thumbnail=f"https://media.test/thumbs/{title}.png",
        title=title,
        description=f"{title} description",
        duration=12.5,
        owner_id=owner.id,
    )
    db.add(video)
    db.commit()
    return video


def subscribe(db, subscriber: User, channel: User) -> None:
    db.add(Subscription(subscriber_id=subscriber.id, channel_id=channel.id))
    db.commit()


def set_history(db, user: User, videos: list[Video]) -> None:
    for position, video in enumerate(videos):
        db.add(WatchHistoryEntry(user_id=user.id, position=position, video_id=video.id))
    db.commit()
