import pytest

from idpayroll.errors import UnknownTaxStatusError
from idpayroll.tax_status import TaxStatus


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("TK/0", TaxStatus.TK_0),
        ("tk0", TaxStatus.TK_0),
        (" K / 1 ", TaxStatus.K_1),
        ("K/I/2", TaxStatus.K_I_2),
        ("ki3", TaxStatus.K_I_3),
        (TaxStatus.K_3, TaxStatus.K_3),
    ],
)
def test_parse_accepts_common_spellings(raw, expected):
    assert TaxStatus.parse(raw) is expected


@pytest.mark.parametrize("raw", ["", "TK/4", "K/I", "married", None])
def test_parse_strict_rejects_unknown(raw):
    with pytest.raises(UnknownTaxStatusError):
        TaxStatus.parse(raw)


def test_parse_lenient_falls_back(caplog):
    assert TaxStatus.parse("K/9", strict=False) is TaxStatus.TK_0
    assert "Unknown PTKP tax status 'K/9'" in caplog.text


def test_there_are_twelve_categories():
    assert len(TaxStatus) == 12
    assert TaxStatus.default() is TaxStatus.TK_0


def test_status_attributes():
    assert not TaxStatus.TK_2.married
    assert TaxStatus.K_0.married
    assert not TaxStatus.K_0.combined_income
    assert TaxStatus.K_I_1.combined_income
    assert TaxStatus.K_I_3.dependents == 3
    assert TaxStatus.TK_0.dependents == 0


def test_value_is_the_official_code():
    assert TaxStatus.K_I_0.value == "K/I/0"
    assert TaxStatus("K/2") is TaxStatus.K_2
