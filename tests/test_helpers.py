"""Tests for the string helpers used to build template variables."""
from datetime import date

from assignment_docs.utils.helpers import (
    clean_content,
    coerce_str,
    first_present,
    format_date,
    format_reference,
)


def test_coerce_str():
    assert coerce_str(None) == ""
    assert coerce_str("  x ") == "x"
    assert coerce_str(12) == "12"


def test_first_present_skips_blank_values():
    data = {"registration_no": " ", "registration_number": "R-9"}
    assert first_present(data, "registration_no", "registration_number") == "R-9"
    assert first_present({}, "a", "b") == ""


def test_format_date():
    assert format_date("2024-03-05") == "05/03/2024"
    assert format_date("2024-03-05T10:30:00Z") == "05/03/2024"
    assert format_date(date(2023, 12, 1)) == "01/12/2023"
    assert format_date("next Friday") == "next Friday"
    assert format_date(None) == ""


def test_format_reference_full():
    ref = {
        "authors": "Doe, J.",
        "year": 2020,
        "title": "On Councils",
        "source": "Gov Journal",
        "url": "https://example.org/a",
    }
    assert format_reference(ref) == (
        "Doe, J.. (2020). On Councils. Gov Journal. Retrieved from https://example.org/a."
    )


def test_format_reference_defaults():
    assert format_reference({"title": "T", "source": "S"}) == "Unknown. (n.d.). T. S."
    assert format_reference({"author": "Roe", "title": "T", "source": "S"}).startswith("Roe.")


def test_format_reference_joins_author_lists():
    ref = {"authors": ["Doe, J.", " ", "Roe, K."], "year": 2021, "title": "T", "source": "S"}
    assert format_reference(ref) == "Doe, J., Roe, K.. (2021). T. S."
    assert format_reference({"authors": [], "author": "Poe", "title": "T", "source": "S"}).startswith("Poe.")


def test_clean_content_strips_markdown_and_blank_lines():
    content = "## Introduction\n\nFirst line.\n   \n### \nSecond line.\n"
    assert clean_content(content) == "Introduction\n\nFirst line.\n\nSecond line."
    assert clean_content(None) == ""
