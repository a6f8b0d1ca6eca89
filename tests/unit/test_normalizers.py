"""Tests for field normalizers."""

import json
from datetime import date, datetime

import pytest

from layoffs.cleaning.normalizer import (
    DateNormalizer,
    EmptyToNullNormalizer,
    IntegerNormalizer,
    NullTokenNormalizer,
    SynonymNormalizer,
    SynonymTable,
    TrailingCharsNormalizer,
)
from layoffs.core.config import MalformedDatePolicy
from layoffs.core.exceptions import MalformedDateError, SynonymConfigError


class TestEmptyToNullNormalizer:
    """Tests for EmptyToNullNormalizer."""

    def test_empty_string(self):
        """Test empty string becomes None."""
        assert EmptyToNullNormalizer().normalize("") is None

    def test_value_untouched(self):
        """Test non-empty values pass through."""
        normalizer = EmptyToNullNormalizer()
        assert normalizer.normalize("Retail") == "Retail"
        assert normalizer.normalize(" ") == " "
        assert normalizer.normalize(None) is None


class TestTrailingCharsNormalizer:
    """Tests for TrailingCharsNormalizer."""

    def test_single_period(self):
        """Test a single trailing period is stripped."""
        assert TrailingCharsNormalizer(".").normalize("United States.") == "United States"

    def test_repeated_periods(self):
        """Test every trailing period is stripped."""
        assert TrailingCharsNormalizer(".").normalize("United States...") == "United States"

    def test_leading_and_interior_untouched(self):
        """Test only the end of the value changes."""
        normalizer = TrailingCharsNormalizer(".")
        assert normalizer.normalize(".St. Kitts.") == ".St. Kitts"

    def test_non_string(self):
        """Test non-string values pass through."""
        assert TrailingCharsNormalizer(".").normalize(None) is None
        assert TrailingCharsNormalizer(".").normalize(5) == 5


class TestSynonymTable:
    """Tests for SynonymTable and SynonymNormalizer."""

    def test_default_crypto_variants(self):
        """Test built-in crypto variants map to Crypto."""
        table = SynonymTable.default()
        assert table.lookup("Crypto Currency") == "Crypto"
        assert table.lookup("CryptoCurrency") == "Crypto"
        assert table.lookup("Crypto") == "Crypto"

    def test_case_sensitive(self):
        """Test lookup is exact and case-sensitive."""
        table = SynonymTable.default()
        assert table.lookup("crypto currency") == "crypto currency"
        assert "crypto currency" not in table

    def test_unknown_untouched(self):
        """Test values outside the table are left alone."""
        normalizer = SynonymNormalizer(SynonymTable.default())
        assert normalizer.normalize("Retail") == "Retail"

    def test_conflicting_variant(self):
        """Test a variant claimed by two labels is rejected."""
        with pytest.raises(SynonymConfigError):
            SynonymTable({"Crypto": ["Web3"], "Finance": ["Web3"]})

    def test_canonical_as_variant_rejected(self):
        """Test a canonical label cannot also be listed as another label's variant."""
        with pytest.raises(SynonymConfigError, match="already a canonical label"):
            SynonymTable({"Crypto": ["Crypto Currency"], "Web3": ["Crypto"]})

    def test_variant_as_canonical_rejected(self):
        """Test a variant cannot later be used as a canonical label."""
        with pytest.raises(SynonymConfigError, match="already a variant"):
            SynonymTable({"Web3": ["Crypto"], "Crypto": ["Crypto Currency"]})

    def test_add_chain_rejected(self):
        """Test add refuses a pair that would chain onto an existing entry."""
        table = SynonymTable.default()

        with pytest.raises(SynonymConfigError):
            table.add("Crypto", "Web3")
        with pytest.raises(SynonymConfigError):
            table.add("Web3", "Crypto Currency")

        assert table.lookup("Crypto Currency") == "Crypto"
        assert "Crypto" not in table
        assert table.canonical_labels == {"Crypto"}

    def test_self_mapping_allowed(self):
        """Test listing a label as its own variant is a no-op."""
        table = SynonymTable({"Crypto": ["Crypto", "Crypto Currency"]})

        assert len(table) == 1
        assert table.lookup("Crypto") == "Crypto"

    def test_repeated_pair_allowed(self):
        """Test registering the same pair twice is accepted."""
        table = SynonymTable.default()
        table.add("Crypto Currency", "Crypto")
        assert len(table) == 2

    def test_lookup_is_stable(self):
        """Test looking up a canonical label returns it unchanged."""
        table = SynonymTable({"Crypto": ["Crypto Currency"], "Fintech": ["FinTech"]})
        for label in table.canonical_labels:
            assert table.lookup(label) == label

    def test_from_file_chain_rejected(self, tmp_path):
        """Test a chained JSON table is a configuration error."""
        path = tmp_path / "synonyms.json"
        path.write_text(json.dumps({"Crypto": ["Crypto Currency"], "Web3": ["Crypto"]}))

        with pytest.raises(SynonymConfigError):
            SynonymTable.from_file(path)

    def test_from_file(self, tmp_path):
        """Test loading groups from JSON."""
        path = tmp_path / "synonyms.json"
        path.write_text(json.dumps({"Crypto": ["Crypto Currency"], "Fintech": ["FinTech"]}))

        table = SynonymTable.from_file(path)

        assert len(table) == 2
        assert table.lookup("FinTech") == "Fintech"
        assert table.canonical_labels == {"Crypto", "Fintech"}

    def test_from_file_invalid_shape(self, tmp_path):
        """Test a file that is not label -> list is rejected."""
        path = tmp_path / "synonyms.json"
        path.write_text(json.dumps({"Crypto": "Crypto Currency"}))

        with pytest.raises(SynonymConfigError):
            SynonymTable.from_file(path)

    def test_from_missing_file(self, tmp_path):
        """Test a missing file is a configuration error."""
        with pytest.raises(SynonymConfigError):
            SynonymTable.from_file(tmp_path / "missing.json")


class TestDateNormalizer:
    """Tests for DateNormalizer."""

    def test_us_format(self):
        """Test MM/DD/YYYY parsing."""
        normalizer = DateNormalizer()
        assert normalizer.normalize("03/04/2022") == date(2022, 3, 4)
        assert normalizer.parsed == 1

    def test_missing_values(self):
        """Test empty and null markers become None."""
        normalizer = DateNormalizer(null_token="NULL")
        assert normalizer.normalize(None) is None
        assert normalizer.normalize("") is None
        assert normalizer.normalize("NULL") is None
        assert normalizer.parsed == 0

    def test_date_passthrough(self):
        """Test already parsed dates are kept."""
        normalizer = DateNormalizer()
        assert normalizer.normalize(date(2022, 3, 4)) == date(2022, 3, 4)
        assert normalizer.normalize(datetime(2022, 3, 4, 10, 30)) == date(2022, 3, 4)
        assert normalizer.parsed == 0

    def test_malformed_fails(self):
        """Test malformed text raises under the fail policy."""
        normalizer = DateNormalizer(policy=MalformedDatePolicy.FAIL)

        with pytest.raises(MalformedDateError) as exc_info:
            normalizer.normalize("2022-03-04")

        assert exc_info.value.value == "2022-03-04"
        assert exc_info.value.date_format == "%m/%d/%Y"

    def test_impossible_date_fails(self):
        """Test a well-shaped but impossible date is malformed."""
        with pytest.raises(MalformedDateError):
            DateNormalizer().normalize("02/30/2022")

    def test_malformed_nulled(self):
        """Test malformed text becomes None under the null policy."""
        normalizer = DateNormalizer(policy=MalformedDatePolicy.NULL)

        assert normalizer.normalize("yesterday") is None
        assert normalizer.rejected == ["yesterday"]

        normalizer.reset()
        assert normalizer.rejected == []
        assert normalizer.parsed == 0


class TestIntegerNormalizer:
    """Tests for IntegerNormalizer."""

    def test_integer_text(self):
        """Test integer text parsing."""
        assert IntegerNormalizer().normalize("120") == 120

    def test_float_text(self):
        """Test integer-valued float text."""
        assert IntegerNormalizer().normalize("120.0") == 120

    def test_missing_values(self):
        """Test empty and null markers become None."""
        normalizer = IntegerNormalizer(null_token="NULL")
        assert normalizer.normalize("") is None
        assert normalizer.normalize("NULL") is None
        assert normalizer.normalize(None) is None

    def test_invalid(self):
        """Test non-integers are rejected."""
        normalizer = IntegerNormalizer()
        with pytest.raises(ValueError):
            normalizer.normalize("12.5")
        with pytest.raises(ValueError):
            normalizer.normalize("many")


class TestNullTokenNormalizer:
    """Tests for NullTokenNormalizer."""

    def test_token(self):
        """Test the token becomes None and other text is kept."""
        normalizer = NullTokenNormalizer("NULL")
        assert normalizer.normalize("NULL") is None
        assert normalizer.normalize("") == ""
        assert normalizer.normalize("Null") == "Null"
