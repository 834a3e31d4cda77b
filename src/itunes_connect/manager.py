"""
App portfolio utilities for itunes-connect-client.

This module provides high-level helpers on top of ITunesConnectClient:
tabular views of apps and build trains, and batch version preparation.
"""

import logging
from typing import Any, Dict, Optional

import pandas as pd

from .client import ITunesConnectClient
from .exceptions import ITunesConnectError
from .languages import LanguageConverter
from .utils import require_app_id, validate_version_string

logger = logging.getLogger(__name__)

PORTFOLIO_COLUMNS = ["adamId", "name", "vendorId", "bundleId", "appType", "primary_locale"]
BUILD_COLUMNS = ["train_version", "platform", "buildVersion", "uploadDate", "processingState"]


class AppManager:
    """
    High-level manager for the apps of an iTunes Connect account.

    Args:
        client: A logged in ITunesConnectClient
    """

    def __init__(self, client: ITunesConnectClient):
        """Initialize with a client."""
        self.client = client

    @property
    def language_converter(self) -> LanguageConverter:
        return self.client.language_converter

    def primary_locale(self, app_summary: Dict[str, Any]) -> Optional[str]:
        """Locale code of an app's primary language, if iTunes Connect reports one."""
        language = app_summary.get("primaryLanguage") or app_summary.get("primaryLocale")
        if not language:
            return None
        return self.language_converter.from_itc_to_standard(language) or language

    def get_app_portfolio(self) -> pd.DataFrame:
        """
        Get all apps in the account as a table.

        Returns:
            DataFrame with one row per app
        """
        summaries = self.client.applications()
        if not summaries:
            return pd.DataFrame(columns=PORTFOLIO_COLUMNS)

        rows = []
        for summary in summaries:
            row = {column: summary.get(column) for column in PORTFOLIO_COLUMNS}
            row["primary_locale"] = self.primary_locale(summary)
            rows.append(row)

        return pd.DataFrame(rows, columns=PORTFOLIO_COLUMNS)

    def build_train_table(self, app_id: str) -> pd.DataFrame:
        """
        Get every build of every train of an app as a table.

        Returns:
            DataFrame with one row per build
        """
        data = self.client.build_trains(app_id)

        rows = []
        for train in data.get("trains") or []:
            for build in train.get("builds") or []:
                rows.append(
                    {
                        "train_version": train.get("versionString"),
                        "platform": train.get("platform"),
                        "buildVersion": build.get("buildVersion"),
                        "uploadDate": build.get("uploadDate"),
                        "processingState": build.get("processingState"),
                    }
                )

        return pd.DataFrame(rows, columns=BUILD_COLUMNS)

    def prepare_version_releases(
        self,
        app_versions: Dict[str, str],
        dry_run: bool = True,
    ) -> Dict[str, Any]:
        """
        Create new versions for multiple apps.

        One app failing does not stop the others.

        Args:
            app_versions: Dictionary mapping app IDs to version strings
            dry_run: If True, only validate without creating

        Returns:
            Dictionary with the ``updated`` app IDs and per-app ``errors``
        """
        results: Dict[str, Any] = {"updated": [], "errors": {}}

        for app_id, version_string in app_versions.items():
            try:
                app_id = require_app_id(app_id)
                version_string = validate_version_string(version_string)

                if not dry_run:
                    self.client.create_version(app_id, version_string)
                results["updated"].append(app_id)
            except ITunesConnectError as e:
                logger.warning(f"prepare_version_releases: {app_id} failed: {e}")
                results["errors"][app_id] = str(e)

        return results
