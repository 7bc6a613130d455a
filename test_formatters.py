from datetime import date, datetime

from spendwise.core import formatters


def test_format_currency():
    assert formatters.format_currency(1234.5) == "$1,234.50"
    assert formatters.format_currency(-1234.5) == "-$1,234.50"
    assert formatters.format_currency(None) == "$0.00"
    assert formatters.format_currency(10, "EUR") == "€10.00"


def test_format_date_variants():
    assert formatters.format_date("2024-03-05") == "Mar 5, 2024"
    assert formatters.format_date(date(2024, 12, 25)) == "Dec 25, 2024"
    assert formatters.format_date(None) == "N/A"
    assert formatters.format_date("not a date") == "Invalid Date"


def test_format_relative_date():
    now = datetime(2024, 3, 20, 12, 0)
    assert formatters.format_relative_date("2024-03-20T09:00:00", now=now) == "Today"
    assert formatters.format_relative_date("2024-03-19T09:00:00", now=now) == "Yesterday"
    assert formatters.format_relative_date("2024-03-16T12:00:00", now=now) == "4 days ago"
    assert formatters.format_relative_date("2024-03-01T12:00:00", now=now) == "2 weeks ago"
    assert formatters.format_relative_date("2021-01-01T12:00:00", now=now) == "3 years ago"


def test_numbers_and_text():
    assert formatters.format_percentage(0.256) == "25.6%"
    assert formatters.format_number(1234567) == "1,234,567"
    assert formatters.truncate_text("abcdefgh", 5) == "abcde..."
    assert formatters.truncate_text("abc", 5) == "abc"
    assert formatters.capitalize_words("hello WORLD") == "Hello World"
    assert formatters.mask_account_id(123456789) == "••••6789"
