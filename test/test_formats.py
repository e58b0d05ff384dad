"""
Tests for the named format catalog.
"""

import pytest

from logmongo.core.formats import (
    BUILTIN_FORMATS,
    FormatCatalog,
    define_format,
    get_format_catalog,
)

from conftest import make_request, make_response


def keys_of(builder):
    return [ref.key for ref in builder.fields]


class TestBuiltinFormats:
    """Test the built-in named formats."""

    def test_builtin_names(self, catalog):
        assert set(BUILTIN_FORMATS) == {"default", "short", "tiny"}
        for name in BUILTIN_FORMATS:
            assert name in catalog

    def test_default_format_tokens(self, catalog):
        assert keys_of(catalog.lookup("default")) == [
            "date", "method", "url", "status", "remote-addr", "response-time",
            "http-version", "remote-user", "res[content-length]", "referrer",
            "user-agent",
        ]

    def test_short_format_tokens(self, catalog):
        assert keys_of(catalog.lookup("short")) == [
            "remote-addr", "remote-user", "method", "url", "http-version",
            "status", "res[content-length]", "response-time",
        ]

    def test_tiny_format_tokens(self, catalog):
        assert keys_of(catalog.lookup("tiny")) == [
            "method", "url", "status", "res[content-length]", "response-time",
        ]


class TestFormatLookup:
    """Test lookup resolution order."""

    def test_callable_used_as_is(self, catalog):
        def builder(registry, request, response):
            return {"custom": True}

        assert catalog.lookup(builder) is builder

    def test_raw_template_compiled(self, catalog):
        builder = catalog.lookup(":method :req[host]")
        assert keys_of(builder) == ["method", "req[host]"]

    def test_missing_falls_back_to_default(self, catalog):
        default = catalog.lookup("default")
        assert catalog.lookup(None) is default
        assert catalog.lookup("") is default

    def test_custom_default_name(self):
        catalog = FormatCatalog(default="tiny")
        assert keys_of(catalog.lookup(None))[0] == "method"

    def test_undefined_default_raises(self):
        catalog = FormatCatalog(formats={}, default="nope")
        with pytest.raises(ValueError):
            catalog.lookup(None)

    def test_non_string_rejected(self, catalog):
        with pytest.raises(TypeError):
            catalog.lookup(123)

    def test_compiled_once_per_template(self, catalog):
        """Repeated lookups reuse the compiled builder."""
        assert catalog.lookup("tiny") is catalog.lookup("tiny")
        assert catalog.lookup(":method") is catalog.lookup(":method")

    def test_name_and_template_share_compilation(self, catalog):
        """A name and its template text compile to the same builder."""
        assert catalog.lookup("tiny") is catalog.lookup(BUILTIN_FORMATS["tiny"])


class TestDefineFormat:
    """Test user-defined formats."""

    def test_define_template(self, catalog, registry):
        catalog.define("mine", ":method :status")
        builder = catalog.lookup("mine")
        record = builder(registry, make_request(), make_response(status_code=204))
        assert dict(record) == {"method": "GET", "status": 204}

    def test_define_overwrites(self, catalog):
        catalog.define("tiny", ":method")
        assert keys_of(catalog.lookup("tiny")) == ["method"]

    def test_define_builder(self, catalog):
        def builder(registry, request, response):
            return None

        catalog.define("nothing", builder)
        assert catalog.get("nothing") is builder
        assert catalog.lookup("nothing") is builder

    def test_define_invalid(self, catalog):
        with pytest.raises(TypeError):
            catalog.define("bad", 3.5)

    def test_define_chains(self, catalog):
        assert catalog.define("a1", ":method").define("a2", ":url") is catalog
        assert {"a1", "a2"} <= set(catalog.names())

    def test_process_wide_catalog(self, isolated_globals):
        define_format("ops", ":method :url")
        assert get_format_catalog() is get_format_catalog()
        assert keys_of(get_format_catalog().lookup("ops")) == ["method", "url"]
        assert "ops" not in FormatCatalog()
