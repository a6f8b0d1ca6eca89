"""Tests for same-company backfill."""

from loguru import logger

from layoffs.cleaning.backfill import Backfiller


class TestBackfiller:
    """Tests for Backfiller."""

    def test_fills_from_sibling(self):
        """Test a null value is copied from the same company."""
        records = [
            {"company": "Airbnb", "industry": None},
            {"company": "Airbnb", "industry": "Travel"},
        ]

        result = Backfiller().backfill(records)

        assert result == [
            {"company": "Airbnb", "industry": "Travel"},
            {"company": "Airbnb", "industry": "Travel"},
        ]

    def test_other_company_not_used(self):
        """Test values never cross companies."""
        records = [
            {"company": "Airbnb", "industry": None},
            {"company": "Booking", "industry": "Travel"},
        ]

        result = Backfiller().backfill(records)

        assert result[0]["industry"] is None

    def test_existing_value_kept(self):
        """Test non-null values are never overwritten."""
        records = [
            {"company": "Zoox", "industry": "Hardware"},
            {"company": "Zoox", "industry": "Transportation"},
        ]

        result = Backfiller().backfill(records)

        assert [r["industry"] for r in result] == ["Hardware", "Transportation"]

    def test_resolve_first_value_wins(self):
        """Test the first non-null value in input order is chosen."""
        backfiller = Backfiller()
        records = [
            {"company": "Zoox", "industry": None},
            {"company": "Zoox", "industry": "Transportation"},
            {"company": "Zoox", "industry": "Hardware"},
            {"company": "Zoox", "industry": "Transportation"},
        ]

        fills = backfiller.resolve(records)

        assert fills == {"Zoox": "Transportation"}
        assert len(backfiller.ambiguities) == 1
        assert backfiller.ambiguities[0].candidates == ("Transportation", "Hardware")
        assert backfiller.ambiguities[0].to_dict() == {
            "company": "Zoox",
            "candidates": ["Transportation", "Hardware"],
            "chosen": "Transportation",
        }

    def test_no_ambiguity_for_repeated_value(self):
        """Test repeats of one value are not ambiguous."""
        backfiller = Backfiller()
        backfiller.resolve([
            {"company": "Kry", "industry": "Healthcare"},
            {"company": "Kry", "industry": "Healthcare"},
        ])

        assert backfiller.ambiguities == []

    def test_ambiguities_reset(self):
        """Test notes from an earlier call are discarded."""
        backfiller = Backfiller()
        backfiller.resolve([
            {"company": "Zoox", "industry": "Hardware"},
            {"company": "Zoox", "industry": "Transportation"},
        ])
        backfiller.resolve([{"company": "Zoox", "industry": "Hardware"}])

        assert backfiller.ambiguities == []

    def test_input_not_mutated(self):
        """Test backfill returns copies."""
        records = [
            {"company": "Airbnb", "industry": None},
            {"company": "Airbnb", "industry": "Travel"},
        ]

        Backfiller()(records)

        assert records[0]["industry"] is None

    def test_custom_fields(self):
        """Test backfilling another column by another entity."""
        records = [
            {"company": "Oda", "country": "Norway"},
            {"company": "Oda", "country": None},
        ]

        result = Backfiller(field="country", entity_field="company").backfill(records)

        assert result[1]["country"] == "Norway"

    def test_ambiguity_logged_as_quality_note(self):
        """Test ambiguity warnings carry the data quality marker."""
        messages = []
        sink_id = logger.add(messages.append, level="WARNING")
        try:
            Backfiller().resolve([
                {"company": "Zoox", "industry": "Hardware"},
                {"company": "Zoox", "industry": "Transportation"},
            ])
        finally:
            logger.remove(sink_id)

        assert len(messages) == 1
        assert messages[0].record["extra"]["quality"] == "ambiguous_backfill"
        assert "Zoox" in messages[0]
