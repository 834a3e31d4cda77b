"""
Tests for the AppManager portfolio helpers.
"""

import pandas as pd
from unittest.mock import Mock

from itunes_connect.exceptions import RemoteValidationError
from itunes_connect.languages import LanguageConverter
from itunes_connect.manager import AppManager


def make_manager():
    client = Mock()
    client.language_converter = LanguageConverter()
    return client, AppManager(client)


class TestPortfolio:
    """Test the app portfolio table."""

    def test_get_app_portfolio(self):
        """Test summaries become rows with a locale code."""
        client, manager = make_manager()
        client.applications.return_value = [
            {
                "adamId": "898536088",
                "name": "Example",
                "vendorId": "SKU1",
                "bundleId": "com.example.app",
                "appType": "iOS App",
                "primaryLanguage": "Brazilian Portuguese",
                "versionSets": [],
            }
        ]

        df = manager.get_app_portfolio()

        assert isinstance(df, pd.DataFrame)
        assert len(df) == 1
        assert df["name"].iloc[0] == "Example"
        assert df["primary_locale"].iloc[0] == "pt-BR"
        assert "versionSets" not in df.columns

    def test_empty_portfolio(self):
        """Test an account without apps."""
        client, manager = make_manager()
        client.applications.return_value = []

        df = manager.get_app_portfolio()

        assert df.empty
        assert "bundleId" in df.columns

    def test_primary_locale_unknown_language(self):
        """Test unknown names are kept as they are."""
        _, manager = make_manager()
        assert manager.primary_locale({"primaryLanguage": "Klingon"}) == "Klingon"
        assert manager.primary_locale({}) is None


class TestBuildTrainTable:
    """Test the build train table."""

    def test_rows_per_build(self):
        client, manager = make_manager()
        client.build_trains.return_value = {
            "trains": [
                {
                    "versionString": "1.0",
                    "platform": "ios",
                    "builds": [
                        {"buildVersion": "1", "uploadDate": 1431036000000, "processingState": "processed"},
                        {"buildVersion": "2", "uploadDate": 1431122400000, "processingState": "processing"},
                    ],
                },
                {"versionString": "1.1", "platform": "ios", "builds": []},
            ]
        }

        df = manager.build_train_table("898536088")

        client.build_trains.assert_called_once_with("898536088")
        assert list(df["buildVersion"]) == ["1", "2"]
        assert set(df["train_version"]) == {"1.0"}

    def test_no_trains(self):
        client, manager = make_manager()
        client.build_trains.return_value = {}

        assert manager.build_train_table("898536088").empty


class TestPrepareVersionReleases:
    """Test batch version creation."""

    def test_dry_run(self):
        """Test nothing is created in a dry run."""
        client, manager = make_manager()

        results = manager.prepare_version_releases({"898536088": "1.1"})

        assert results == {"updated": ["898536088"], "errors": {}}
        client.create_version.assert_not_called()

    def test_errors_do_not_stop_batch(self):
        """Test one failing app leaves the others alone."""
        client, manager = make_manager()
        client.create_version.side_effect = [
            RemoteValidationError(["Version already exists."]),
            {"version": "2.0"},
        ]

        results = manager.prepare_version_releases(
            {"111111111": "1.1", "222222222": "2.0", "333333333": "bogus"},
            dry_run=False,
        )

        assert results["updated"] == ["222222222"]
        assert results["errors"]["111111111"] == "Version already exists."
        assert "Invalid version format" in results["errors"]["333333333"]
        assert client.create_version.call_count == 2
