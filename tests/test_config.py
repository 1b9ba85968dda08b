"""Unit tests for vidtube.core.config.Settings validation."""

import unittest

from pydantic import ValidationError

from support import make_settings


class TestSettingsValidation(unittest.TestCase):
    def test_defaults_for_tests_are_valid(self) -> None:
        settings = make_settings()
        self.assertEqual(settings.APP_ENV, "test")
        self.assertEqual(settings.REFRESH_TOKEN_EXPIRE_DAYS, 10)
        self.assertEqual(settings.MEDIA_BACKEND, "local")

    def test_database_url_must_be_postgres_or_sqlite(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(DATABASE_URL="mysql://root@localhost/vidtube")
        with self.assertRaises(ValidationError):
            make_settings(DATABASE_URL="   ")
        self.assertEqual(
            make_settings(DATABASE_URL=" postgresql+psycopg2://u:p@db/vidtube ").DATABASE_URL,
            "postgresql+psycopg2://u:p@db/vidtube",
        )

    def test_log_level_is_normalised(self) -> None:
        self.assertEqual(make_settings(LOG_LEVEL=" debug ").LOG_LEVEL, "DEBUG")
        with self.assertRaises(ValidationError):
            make_settings(LOG_LEVEL="chatty")

    def test_token_secrets_must_not_be_blank(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(ACCESS_TOKEN_SECRET="  ")
        with self.assertRaises(ValidationError):
            make_settings(REFRESH_TOKEN_SECRET="")

    def test_token_lifetimes_are_bounded(self) -> None:
        for field, bad in (
            ("ACCESS_TOKEN_EXPIRE_MINUTES", 0),
            ("ACCESS_TOKEN_EXPIRE_MINUTES", 10081),
            ("REFRESH_TOKEN_EXPIRE_DAYS", 0),
            ("REFRESH_TOKEN_EXPIRE_DAYS", 366),
        ):
            with self.subTest(field=field, value=bad):
                with self.assertRaises(ValidationError):
                    make_settings(**{field: bad})

    def test_bcrypt_rounds_are_bounded(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(BCRYPT_ROUNDS=3)
        with self.assertRaises(ValidationError):
            make_settings(BCRYPT_ROUNDS=17)

    def test_media_url_prefix_must_be_absolute(self) -> None:
        self.assertEqual(make_settings(MEDIA_URL_PREFIX="/uploads/").MEDIA_URL_PREFIX, "/uploads")
        with self.assertRaises(ValidationError):
            make_settings(MEDIA_URL_PREFIX="uploads")

    def test_unknown_media_backend_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(MEDIA_BACKEND="s3")

    def test_cloudinary_timeout_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(CLOUDINARY_REQUEST_TIMEOUT_SEC=0)
        with self.assertRaises(ValidationError):
            make_settings(CLOUDINARY_REQUEST_TIMEOUT_SEC=121)

    def test_cors_origins_split_on_commas(self) -> None:
        settings = make_settings(CORS_ORIGINS="http://a.test, http://b.test ,,")
        self.assertEqual(settings.cors_origins, ["http://a.test", "http://b.test"])


if __name__ == "__main__":
    unittest.main()
