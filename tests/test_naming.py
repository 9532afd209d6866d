"""Tests for name normalization and derived identifiers."""

from __future__ import annotations

import pytest

from hive_scaffold.core.naming import (
    app_namespace,
    container_prefix,
    database_name,
    is_valid_app_name,
    normalize_name,
    package_name,
    validate_bucket_name,
)


class TestNormalizeName:

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("My App", "my-app"),
            ("shop", "shop"),
            ("__Admin  Panel__", "admin-panel"),
            ("api--v2", "api-v2"),
            ("Café & Bar!", "caf-bar"),
            ("", ""),
        ],
    )
    def test_normalizes(self, raw: str, expected: str) -> None:
        assert normalize_name(raw) == expected

    @pytest.mark.parametrize("raw", ["My App", "--x--y--", "A_B_C", "héllo wörld"])
    def test_is_idempotent(self, raw: str) -> None:
        once = normalize_name(raw)
        assert normalize_name(once) == once


class TestAppNameValidation:

    @pytest.mark.parametrize("name", ["shop", "admin-panel", "api2", "a-b-c"])
    def test_accepts_normalized_names(self, name: str) -> None:
        assert is_valid_app_name(name)

    @pytest.mark.parametrize("name", ["Shop", "-shop", "shop-", "my--app", "my_app", "my app", ""])
    def test_rejects_other_names(self, name: str) -> None:
        assert not is_valid_app_name(name)


class TestDerivedIdentifiers:

    def test_database_name_uses_underscores(self) -> None:
        assert database_name("admin-panel") == "admin_panel"

    def test_namespace_is_pascal_case(self) -> None:
        assert app_namespace("admin-panel") == "AdminPanel"
        assert app_namespace("my_cool-app") == "MyCoolApp"

    def test_package_name_has_vendor_prefix(self) -> None:
        assert package_name("Admin Panel") == "phphive/admin-panel"

    def test_container_prefix(self) -> None:
        assert container_prefix("shop") == "phphive-shop"


class TestValidateBucketName:

    @pytest.mark.parametrize(
        "raw",
        ["", "a", "ab", "My Bucket", "x" * 100, "-" * 70, "a-" * 40, "Shop_Assets!!"],
    )
    def test_length_always_within_bounds(self, raw: str) -> None:
        bucket = validate_bucket_name(raw)
        assert 3 <= len(bucket) <= 63
        assert bucket == bucket.lower()
        assert not bucket.startswith("-")
        assert not bucket.endswith("-")

    def test_short_names_get_prefix(self) -> None:
        assert validate_bucket_name("ab") == "bucket-ab"

    def test_long_names_are_truncated(self) -> None:
        assert validate_bucket_name("y" * 80) == "y" * 63

    def test_regular_name_is_normalized(self) -> None:
        assert validate_bucket_name("Shop Assets") == "shop-assets"
