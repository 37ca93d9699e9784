"""Tests for named and AMOUNT token resolvers."""

import pytest
from modpatch.lib.parser import (
    AmountResolver,
    NamedResolver,
    RegexTokenScanner,
    TokenResolver,
    amountInput_fromText,
)
from modpatch.models.dataModel import AmountInput, OptionRow, Token, ValueRadix


def token_of(text: str) -> Token:
    return RegexTokenScanner().scan([f"11111111 {text}"])[0]


def test_resolvers_satisfy_protocol() -> None:
    assert isinstance(NamedResolver(), TokenResolver)
    assert isinstance(AmountResolver(), TokenResolver)


def test_named_resolver_uses_value_cell() -> None:
    result = NamedResolver().resolve(token_of("{ITEM}"), OptionRow(cells=[" 0001 ", "Potion"]))
    assert result.success
    assert result.text == "0001"
    assert result.label == "Potion"


def test_named_resolver_label_falls_back_to_token() -> None:
    result = NamedResolver().resolve(token_of("{ITEM}"), OptionRow(cells=["0001", ""]))
    assert result.label == "ITEM"


def test_named_resolver_custom_text() -> None:
    result = NamedResolver().resolve(token_of("{ITEM}"), "00FF")
    assert (result.text, result.label) == ("00FF", "00FF")


@pytest.mark.parametrize("value", ["", "   ", OptionRow(cells=[])])
def test_named_resolver_rejects_empty(value: object) -> None:
    result = NamedResolver().resolve(token_of("{ITEM}"), value)
    assert not result.success
    assert "Empty value" in result.error


def test_resolvers_reject_wrong_kind() -> None:
    assert not NamedResolver().resolve(token_of("{AMOUNT}"), "1").success
    assert not AmountResolver().resolve(token_of("{ITEM}"), "1").success


def test_amount_resolver_decimal() -> None:
    result = AmountResolver().resolve(token_of("{AMOUNT:00FF}"), "1")
    assert result.success
    assert result.text == "0001"
    assert result.label == "1"


def test_amount_resolver_hex_prefix() -> None:
    result = AmountResolver().resolve(token_of("{AMOUNT}"), "0x10")
    assert result.text == "00000010"


def test_amount_resolver_failure_has_no_label() -> None:
    result = AmountResolver().resolve(token_of("{AMOUNT}"), "lots")
    assert not result.success
    assert result.label is None


def test_amount_input_radix() -> None:
    assert amountInput_fromText("0x1F").radix == ValueRadix.HEX
    assert amountInput_fromText("0X1f").radix == ValueRadix.HEX
    assert amountInput_fromText(" 12 ") == AmountInput(text=" 12 ")
