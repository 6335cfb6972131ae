"""Tests for package records."""

import pytest

from aipman.package import Package


class TestFromDict:

    def test_full_record(self):
        package = Package.from_dict({
            "name": "foo", "version": "1.0", "description": "Foo app",
            "url": "https://example.com/foo.zip", "compressed": True,
        })
        assert package == Package("foo", "1.0", "Foo app", "https://example.com/foo.zip", True)

    def test_optional_fields_default(self):
        package = Package.from_dict({"name": "foo", "version": "1.0", "url": "https://example.com/foo"})
        assert package.description == ""
        assert package.compressed is False

    def test_unknown_keys_are_ignored(self):
        package = Package.from_dict({"name": "foo", "version": "1.0", "url": "u", "homepage": "x"})
        assert package.name == "foo"

    @pytest.mark.parametrize("data", [
        {"version": "1.0", "url": "u"},
        {"name": "foo", "url": "u"},
        {"name": "foo", "version": "1.0"},
        {"name": "", "version": "1.0", "url": "u"},
        {"name": "foo", "version": 1.0, "url": "u"},
        {"name": "foo", "version": "1.0", "url": "u", "compressed": "yes"},
        {"name": "foo", "version": "1.0", "url": "u", "description": 5},
        ["foo", "1.0"],
    ])
    def test_invalid_records(self, data):
        with pytest.raises(ValueError):
            Package.from_dict(data)

    @pytest.mark.parametrize("field, value", [
        ("name", "../escaped"),
        ("name", "sub/foo"),
        ("name", ".."),
        ("name", "."),
        ("name", ".hidden"),
        ("name", "foo\0bar"),
        ("version", "../../1.0"),
        ("version", ".1"),
    ])
    def test_name_and_version_must_be_plain_file_name_parts(self, field, value):
        data = {"name": "foo", "version": "1.0", "url": "u"}
        data[field] = value
        with pytest.raises(ValueError, match=field):
            Package.from_dict(data)

    def test_dots_inside_values_are_fine(self):
        package = Package.from_dict({"name": "foo.bar", "version": "1.2.3-rc1", "url": "u"})
        assert package.artifact_name("AppImage") == "foo.bar-1.2.3-rc1.AppImage"


class TestToDict:

    def test_compressed_only_written_when_true(self):
        assert "compressed" not in Package("foo", "1.0", "", "u").to_dict()
        assert Package("foo", "1.0", "", "u", True).to_dict()["compressed"] is True

    def test_round_trip(self):
        package = Package("foo", "1.0", "Foo", "https://example.com/foo.tar.gz", True)
        assert Package.from_dict(package.to_dict()) == package


def test_artifact_name_is_derived_from_name_and_version():
    assert Package("foo", "1.2.3", "", "u").artifact_name("AppImage") == "foo-1.2.3.AppImage"


def test_describe_lists_fields():
    text = Package("foo", "1.0", "Foo app", "https://example.com/foo").describe()
    assert "foo" in text
    assert "Foo app" in text
    assert "https://example.com/foo" in text
