"""Unit tests for payment terms parsing"""

import pytest
from decimal import Decimal
from discount_gateway.domain.models import DiscountSchedule
from discount_gateway.domain.terms import parse_terms


def test_parse_discount_terms():
    """Standard 2/10 net 30"""
    schedule = parse_terms("2/10 net 30")

    assert schedule == DiscountSchedule(discount_pct=Decimal(2), discount_days=10, net_days=30)
    assert schedule.has_discount is True


@pytest.mark.parametrize(
    "raw",
    ["2/10net30", "2/10 NET 30", "  2 / 10   Net30 ", "2/10\tnet\n30"],
)
def test_parse_terms_ignores_case_and_whitespace(raw):
    assert parse_terms(raw) == DiscountSchedule(Decimal(2), 10, 30)


def test_parse_terms_digit_widths():
    """Two-digit pct/days and three-digit net days are accepted"""
    assert parse_terms("99/99 net 999") == DiscountSchedule(Decimal(99), 99, 999)
    assert parse_terms("1/10 NET45") == DiscountSchedule(Decimal(1), 10, 45)


def test_parse_net_only_terms():
    """n/N means no discount"""
    schedule = parse_terms("n/30")

    assert schedule == DiscountSchedule(discount_pct=Decimal(0), discount_days=0, net_days=30)
    assert schedule.has_discount is False
    assert parse_terms("N / 120") == DiscountSchedule(Decimal(0), 0, 120)


def test_parse_terms_rejects_inconsistent_numbers():
    """Net days must exceed discount days, pct and days must be positive"""
    assert parse_terms("5/30 net 10") is None
    assert parse_terms("2/30 net 30") is None
    assert parse_terms("0/10 net 30") is None
    assert parse_terms("2/0 net 30") is None


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "net 30",
        "due on receipt",
        "100/10 net 30",  # pct wider than two digits
        "2/100 net 300",  # discount days wider than two digits
        "2/10 net 1000",  # net days wider than three digits
        "2.5/10 net 30",
        "2/10 net 30 eom",  # trailing text
        "n/1000",
        "n/0",
    ],
)
def test_parse_terms_rejects_unsupported(raw):
    assert parse_terms(raw) is None


def test_parse_terms_non_string():
    """Missing CSV cells must not crash the parser"""
    assert parse_terms(None) is None
    assert parse_terms(30) is None
