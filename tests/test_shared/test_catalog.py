"""
Tests for the service catalog.

Resolution must be total: every input yields a non-empty display name.
"""

import pytest

from shared.catalog import (
    BIRTH_CHART,
    DISPLAY_NAMES,
    GENERAL_CONSULTATION,
    ServiceCode,
    resolve,
)


class TestServiceCode:
    """Tests for the ServiceCode enumeration."""

    def test_every_code_has_a_display_name(self):
        """Every catalog entry maps to a non-empty display name."""
        for code in ServiceCode:
            assert DISPLAY_NAMES[code]

    def test_legacy_aliases_share_display_names(self):
        """Old frontend spellings resolve to the same reading."""
        assert ServiceCode.DASHA_PERIOD_LEGACY.display_name == ServiceCode.DASHA_PERIOD.display_name
        assert ServiceCode.LAL_KITAB_LEGACY.display_name == ServiceCode.LAL_KITAB.display_name


class TestResolve:
    """Tests for resolve()."""

    def test_known_code(self):
        """A catalog key resolves to its display name."""
        resolved = resolve("numerology")

        assert resolved.known is True
        assert resolved.code == ServiceCode.NUMEROLOGY
        assert resolved.display_name == "Numerology Reading"

    def test_surrounding_whitespace_is_ignored(self):
        assert resolve("  kundli ").display_name == "Kundli Analysis 200+ Pages"

    def test_unknown_code_keeps_raw_value(self):
        """An unknown code is shown as given, flagged as unknown."""
        resolved = resolve("tarot-deluxe")

        assert resolved.known is False
        assert resolved.display_name == "tarot-deluxe"
        assert resolved.raw_code == "tarot-deluxe"

    @pytest.mark.parametrize("code", [None, "", "   "])
    def test_absent_code_uses_default(self, code):
        resolved = resolve(code)

        assert resolved.known is False
        assert resolved.display_name == GENERAL_CONSULTATION

    def test_route_specific_default(self):
        """The pending-payment route falls back to the birth chart label."""
        assert resolve(None, default=BIRTH_CHART).display_name == "Birth Chart Generation"

    def test_matching_is_case_sensitive(self):
        """Codes are exact keys; a different case is an unknown code."""
        resolved = resolve("NUMEROLOGY")

        assert resolved.known is False
        assert resolved.display_name == "NUMEROLOGY"

    @pytest.mark.parametrize("code", ["", "x", "numerology", "???", "Dasha-period", "0"] + [c.value for c in ServiceCode])
    def test_resolution_is_total(self, code):
        """resolve never raises and never returns an empty name."""
        assert resolve(code).display_name

    def test_non_string_input_uses_default(self):
        assert resolve(42).display_name == GENERAL_CONSULTATION
