"""Yardımcı fonksiyonlar ve form doğrulamaları unit testleri."""

from datetime import date, datetime

import pytest

from kumas_stok import validation
from kumas_stok.utils import (
    days_ago,
    format_kg,
    format_unit_price,
    format_usd,
    group_by,
    is_in_range,
    normalize_text,
    parse_date,
    parse_number,
    round_to,
    rows_to_csv,
    short_ref,
)


class TestDates:

    def test_parse_date_variants(self):
        assert parse_date("2024-03-05T12:30:00+00:00") == date(2024, 3, 5)
        assert parse_date(datetime(2024, 3, 5, 8)) == date(2024, 3, 5)
        assert parse_date(date(2024, 3, 5)) == date(2024, 3, 5)

    def test_parse_date_invalid(self):
        with pytest.raises(ValueError):
            parse_date("05.03.2024")

    def test_range_inclusive(self):
        assert is_in_range("2024-01-31", "2024-01-01", "2024-01-31") is True
        assert is_in_range("2024-02-01", "2024-01-01", "2024-01-31") is False
        assert is_in_range("bozuk", "2024-01-01", "2024-01-31") is False

    def test_days_ago(self):
        assert days_ago(30, today=date(2024, 3, 31)) == date(2024, 3, 1)


class TestNumbers:

    def test_parse_number(self):
        assert parse_number("12,5") == 12.5
        assert parse_number(" 7 ") == 7
        assert parse_number("abc") == 0
        assert parse_number(None) == 0
        assert parse_number("") == 0

    def test_round_to_no_negative_zero(self):
        assert str(round_to(-0.001)) == "0.0"
        assert round_to(1.23456, 3) == 1.235

    def test_formatting(self):
        assert format_kg(12) == "12.00"
        assert format_kg(None) == "0.00"
        assert format_usd(3.5) == "$3.50"
        assert format_unit_price(2.5) == "$2.5000"


class TestText:

    def test_normalize_turkish(self):
        assert normalize_text("  ŞİŞLİ Örgü ") == "sisli orgu"
        assert normalize_text(None) == ""

    def test_short_ref(self):
        assert short_ref("abcdef123456") == "123456"
        assert short_ref(None) == ""


class TestLists:

    def test_group_by_key_and_callable(self):
        items = [{"t": "a", "v": 1}, {"t": "b", "v": 2}, {"t": "a", "v": 3}]
        assert {k: len(v) for k, v in group_by(items, "t").items()} == {"a": 2, "b": 1}
        assert set(group_by(items, lambda i: i["v"] > 1)) == {False, True}

    def test_rows_to_csv(self):
        text = rows_to_csv([{"Ad": "Akın", "Not": None}, {"Ad": "Ece, Ltd", "Not": "x"}])
        assert text.splitlines() == ["Ad,Not", "Akın,", '"Ece, Ltd",x']
        assert rows_to_csv([]) == ""


class TestValidation:

    def test_required(self):
        assert validation.required("  ", "Ürün adı") == "Ürün adı zorunludur"
        assert validation.required("Süprem", "Ürün adı") is None

    def test_number(self):
        assert validation.number("abc", "Kg") == "Kg geçerli bir sayı olmalıdır"
        assert validation.number("0", "Kg", min_value=0.01) == "Kg en az 0.01 olmalıdır"
        assert validation.number("5,5", "Kg", min_value=0.01, max_value=10) is None
        assert validation.number(11, "Kg", max_value=10) == "Kg en fazla 10 olmalıdır"

    def test_email_and_phone(self):
        assert validation.email("", "E-posta") is None
        assert validation.email("a@b", "E-posta") is not None
        assert validation.phone("+90 (212) 555-00-00", "Telefon") is None
        assert validation.phone("abc", "Telefon") is not None

    def test_collect(self):
        assert validation.collect(None, "hata", None) == ["hata"]

    def test_date(self):
        assert validation.date("2024-01-15", "Tarih") is None
        assert validation.date("2024-01-15T10:30:00+00:00", "Tarih") is None
        assert validation.date("", "Tarih") is None
        assert validation.date("15.01.2024", "Tarih") == "Tarih geçerli bir tarih olmalıdır"
        assert validation.date("2024-02-30", "Tarih") == "Tarih geçerli bir tarih olmalıdır"
