"""Tests for roll number validation and helpers."""

import pytest

from bed_results.errors import InvalidIdentifierError
from bed_results.scraper.validation import (
    chunk_list,
    format_processing_time,
    is_valid_identifier,
    validate_identifier,
)


class TestValidation:

    @pytest.mark.parametrize("roll_number, valid", [
        ("ED18A02166", True),
        ("ed18a02166", False),
        ("ED18A0216", False),
        ("E018A02166", False),
        ("ED18A021666", False),
    ])
    def test_is_valid_identifier(self, roll_number, valid):
        assert is_valid_identifier(roll_number) is valid

    def test_validate_identifier_sanitizes(self):
        assert validate_identifier(" ed18a02166\n") == "ED18A02166"

    @pytest.mark.parametrize("value", ["", "ED18", 1234, None])
    def test_validate_identifier_rejects(self, value):
        with pytest.raises(InvalidIdentifierError):
            validate_identifier(value)

    def test_chunk_list(self):
        assert chunk_list([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]

        with pytest.raises(ValueError):
            chunk_list([1], 0)

    @pytest.mark.parametrize("milliseconds, expected", [
        (850, "850ms"),
        (1500, "1.5s"),
        (125000, "2m 5.0s"),
    ])
    def test_format_processing_time(self, milliseconds, expected):
        assert format_processing_time(milliseconds) == expected
