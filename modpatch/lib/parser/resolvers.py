"""
Token resolvers for MODPATCH.

Implements specific resolution strategies for the two token kinds:
- Named: the value cell of the chosen option-table row
- Amount: the typed answer, encoded per the token's directive
"""

from typing import Self
from modpatch.lib.encoder import spec_build, value_encode
from modpatch.lib.log import LOG
from modpatch.models.dataModel import (
    AmountInput,
    OptionRow,
    ParseResult,
    Token,
    TokenKind,
    ValueRadix,
)


def amountInput_fromText(text: str) -> AmountInput:
    """Read a typed answer; a 0x prefix selects hex input."""
    s = (text or "").strip()
    if s[:2].lower() == "0x":
        return AmountInput(text=s, radix=ValueRadix.HEX)
    return AmountInput(text=text or "")


class NamedResolver:
    """Resolver for named tokens using a chosen option row."""

    def resolve(self: Self, token: Token, value: OptionRow | str) -> ParseResult:
        """Use the row's value cell; a bare string is a custom value.

        Args:
            token: NAMED token being resolved
            value: Chosen row, or a value typed directly

        Returns:
            ParseResult containing the value and the row's label
        """
        if token.kind != TokenKind.NAMED:
            msg: str = f"Not a named token: {token.name}"
            LOG(msg)
            return ParseResult(text="", error=msg, success=False)

        if isinstance(value, OptionRow):
            text: str = value.value.strip()
            label: str = value.label(token.name)
        else:
            text = str(value or "").strip()
            label = text or token.name

        if not text:
            msg = f"Empty value for {{{token.name}}}"
            LOG(msg)
            return ParseResult(text="", error=msg, success=False)

        return ParseResult(text=text, error=None, success=True, label=label)


class AmountResolver:
    """Resolver for AMOUNT tokens using the value encoder."""

    def resolve(self: Self, token: Token, value: AmountInput | str) -> ParseResult:
        """Encode the answer with the token's (possibly overridden) spec."""
        if token.kind != TokenKind.AMOUNT:
            msg: str = f"Not an AMOUNT token: {token.name}"
            LOG(msg)
            return ParseResult(text="", error=msg, success=False)

        answer: AmountInput = (
            value if isinstance(value, AmountInput) else amountInput_fromText(value)
        )
        result: ParseResult = value_encode(
            answer, spec_build(token, answer.type, answer.endian)
        )
        if result.success:
            result.label = answer.text.strip() or None
        return result
