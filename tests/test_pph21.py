from decimal import Decimal

import pytest

from idpayroll.engine import apply_brackets, calculate_pph21
from idpayroll.errors import NegativeAmountError, UnknownTaxStatusError
from idpayroll.rules import load_rate_table
from idpayroll.tax_status import TaxStatus


@pytest.fixture(scope="module")
def brackets():
    return load_rate_table("2024").brackets


def test_ten_million_single_no_dependents():
    result = calculate_pph21(10_000_000, "TK/0", 395_596)

    assert result.annual_gross == 120_000_000
    assert result.occupational_expense == 6_000_000
    assert result.bpjs_deductible == 4_747_152
    assert result.net_annual_income == 109_252_848
    assert result.exemption == 54_000_000
    assert result.taxable_income == 55_252_848
    assert result.annual_tax == Decimal("2762642.40")
    assert result.monthly_tax == 230_220
    assert result.tax_status is TaxStatus.TK_0


def test_married_two_dependents():
    result = calculate_pph21(20_000_000, TaxStatus.K_2, 615_596)

    assert result.exemption == 67_500_000
    assert result.taxable_income == 159_112_848
    assert result.annual_tax == Decimal("17866927.20")
    assert result.monthly_tax == 1_488_911
    assert [layer.rate for layer in result.layers] == [Decimal("0.05"), Decimal("0.15")]


def test_occupational_expense_below_cap():
    result = calculate_pph21(5_000_000, "TK/0", 0)

    assert result.occupational_expense == 3_000_000


def test_income_below_exemption_pays_nothing():
    result = calculate_pph21(4_000_000, "TK/0", 0)

    assert result.taxable_income == 0
    assert result.annual_tax == 0
    assert result.monthly_tax == 0
    assert result.layers == ()


def test_monthly_tax_rounds_half_up():
    # 5,000,000 gross leaves a PKP of 120 with these deductions: 6 per year, 0.5 per month
    result = calculate_pph21(5_000_000, "TK/0", 249_990)

    assert result.taxable_income == 120
    assert result.annual_tax == 6
    assert result.monthly_tax == 1


def test_zero_gross():
    result = calculate_pph21(0, "K/I/3", 0)

    assert result.monthly_tax == 0


def test_combined_income_exemption_is_larger():
    single = calculate_pph21(30_000_000, "K/0", 0)
    combined = calculate_pph21(30_000_000, "K/I/0", 0)

    assert combined.exemption == 112_500_000
    assert combined.monthly_tax < single.monthly_tax


def test_explain_trail_lists_brackets():
    result = calculate_pph21(10_000_000, "TK/0", 395_596)

    assert result.explain[0] == "status=TK/0 ptkp=54000000"
    assert any(line.startswith("5% on 55252848") for line in result.explain)
    assert result.explain[-1].startswith("annual_tax=")


def test_to_dict_exposes_layers():
    payload = calculate_pph21(10_000_000, "TK/0", 395_596).to_dict()

    assert payload["tax_status"] == "TK/0"
    assert payload["rates_version"] == "2024"
    assert payload["layers"][0]["upper"] == 60_000_000


@pytest.mark.parametrize(
    "pkp, expected",
    [
        (0, Decimal("0")),
        (60_000_000, Decimal("3000000")),
        (60_000_001, Decimal("3000000.15")),
        (250_000_000, Decimal("31500000")),
        (500_000_000, Decimal("94000000")),
        (5_000_000_000, Decimal("1444000000")),
        (6_000_000_000, Decimal("1794000000")),
    ],
)
def test_bracket_boundaries(brackets, pkp, expected):
    tax, _ = apply_brackets(Decimal(pkp), brackets)

    assert tax == expected


def test_bracket_layers_cover_amount(brackets):
    tax, layers = apply_brackets(Decimal(300_000_000), brackets)

    assert [layer.taxable for layer in layers] == [60_000_000, 190_000_000, 50_000_000]
    assert layers[1].lower == 60_000_000
    assert layers[1].upper == 250_000_000
    assert tax == sum(layer.tax for layer in layers)


def test_top_bracket_is_open(brackets):
    _, layers = apply_brackets(Decimal(6_000_000_000), brackets)

    assert layers[-1].upper is None
    assert layers[-1].taxable == 1_000_000_000
    assert layers[-1].rate == Decimal("0.35")


def test_unknown_status_rejected():
    with pytest.raises(UnknownTaxStatusError):
        calculate_pph21(10_000_000, "X/9", 0)


@pytest.mark.parametrize("gross, bpjs", [(-1, 0), (1_000_000, -5)])
def test_negative_inputs_rejected(gross, bpjs):
    with pytest.raises(NegativeAmountError):
        calculate_pph21(gross, "TK/0", bpjs)
