from decimal import Decimal

import pytest

from hub360.calc.allocation import allocate, weights_for
from hub360.calc.money import CalculoInvalido, D, format_brl, money, parse_brl, safe_div


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("R$ 1.234,56", Decimal("1234.56")),
        ("1234,5", Decimal("1234.5")),
        ("1.234", Decimal("1234")),
        ("1.234.567", Decimal("1234567")),
        ("12.50", Decimal("12.50")),
        ("-R$ 10,00", Decimal("-10.00")),
        ("R$ -10,00", Decimal("-10.00")),
        ("0.500", Decimal("0.500")),
        ("0,5", Decimal("0.5")),
        (150, Decimal("150")),
    ],
)
def test_parse_brl(raw, expected):
    assert parse_brl(raw) == expected


@pytest.mark.parametrize("raw", ["", "R$", "abc", "1,2,3", "10-5", "1e5", "12abc", "--5", "US$ 10", "1.23.456"])
def test_parse_brl_rejects_garbage(raw):
    with pytest.raises(CalculoInvalido):
        parse_brl(raw)


def test_format_brl():
    assert format_brl(Decimal("1234.56")) == "R$ 1.234,56"
    assert format_brl(Decimal("0.5")) == "R$ 0,50"
    assert format_brl(Decimal("-1000000")) == "-R$ 1.000.000,00"


def test_money_rounds_half_up():
    assert money("2.675") == Decimal("2.68")
    assert money("2.665") == Decimal("2.67")
    assert money(0.1 + 0.2) == Decimal("0.30")


def test_d_rejects_bool_and_text():
    with pytest.raises(CalculoInvalido):
        D(True)
    with pytest.raises(CalculoInvalido) as exc:
        D("dez", "price")
    assert exc.value.field == "price"


def test_safe_div_by_zero_is_zero():
    assert safe_div(10, 0) == Decimal("0")


def test_allocate_sums_exactly_to_total():
    parts = allocate(Decimal("100.00"), [1, 1, 1])
    assert parts == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(parts) == Decimal("100.00")


def test_allocate_largest_remainder_goes_to_biggest_fraction():
    # exatos: 0.333..., 0.666... => o centavo extra vai para o segundo
    parts = allocate(Decimal("1.00"), [1, 2])
    assert parts == [Decimal("0.33"), Decimal("0.67")]


def test_allocate_zero_weights_split_equally():
    assert allocate(Decimal("10"), [0, 0]) == [Decimal("5.00"), Decimal("5.00")]


def test_allocate_empty():
    assert allocate(0, []) == []
    with pytest.raises(CalculoInvalido):
        allocate(10, [])


def test_allocate_negative_weight_rejected():
    with pytest.raises(CalculoInvalido):
        allocate(10, [1, -1])


def test_weights_for_methods():
    items = [
        {"peso_total": 2, "valor_fob": 100, "quantidade": 10, "cbm_total": "0.5", "percentual_rateio": 25},
        {"peso_total": 6, "valor_fob": 300, "quantidade": 5, "cbm_total": "1.5", "percentual_rateio": 75},
    ]
    assert weights_for("peso", items) == [Decimal(2), Decimal(6)]
    assert weights_for("valor_fob", items) == [Decimal(100), Decimal(300)]
    assert weights_for("quantidade", items) == [Decimal(10), Decimal(5)]
    assert weights_for("cbm", items) == [Decimal("0.5"), Decimal("1.5")]
    assert weights_for("personalizado", items) == [Decimal(25), Decimal(75)]


def test_weights_for_custom_must_sum_100():
    items = [{"percentual_rateio": 30}, {"percentual_rateio": 30}]
    with pytest.raises(CalculoInvalido) as exc:
        weights_for("personalizado", items)
    assert exc.value.field == "percentual_rateio"


def test_weights_for_unknown_method():
    with pytest.raises(CalculoInvalido):
        weights_for("sorteio", [{}])
