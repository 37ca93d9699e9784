r"""
Token scanning for MODPATCH code blocks.

Finds the placeholders a code line may carry:

- Named tokens, `{NAME}`, referencing an option table. A `{` preceded by a
  backslash is an escape and never starts a token.
- Amount tokens, `{AMOUNT[:default[:type][:endian]]}`, carrying an inline
  encoding directive. The default is `NA` or hex digits (absent means
  `00000000`), type is one of HEX, FLOAT, ABC123, UTF08, UTF16 (HEX when
  absent) and endian one of BIG, LITTLE, TXT (BIG when absent).

Scanning stops at the first bare `{TAG}` line of a block: whatever follows
is an option table definition, not code.

Scan results are positions into the current lines and go stale the moment
a line is edited; callers rescan after every splice.

Example:
    scanner = RegexTokenScanner()
    token = token_first(scanner, block.lines)
    block.lines[token.line] = token_splice(block.lines[token.line], token, "0001")
"""

import re
from typing import Final, Optional, Protocol, Self, runtime_checkable
from modpatch.lib.tables import line_isBareTag
from modpatch.models.dataModel import AmountType, Endian, ParseResult, Token, TokenKind

AMOUNT_DEFAULT: Final[str] = "00000000"

_named_re: Final[re.Pattern] = re.compile(r"(?<!\\)\{(?P<name>[A-Za-z0-9_]+)\}")
_amount_re: Final[re.Pattern] = re.compile(
    r"\{AMOUNT(?::(?P<default>NA|[0-9A-Fa-f]*)"
    r"(?::(?P<type>HEX|FLOAT|ABC123|UTF08|UTF16))?"
    r"(?::(?P<endian>BIG|LITTLE|TXT))?)?\}",
    re.IGNORECASE,
)


@runtime_checkable
class TokenScanner(Protocol):
    """Protocol for anything that can locate tokens in code lines.

    Implementations must report tokens in line order, then left to right,
    and must not cache results across calls.
    """

    def scan(self: Self, lines: list[str]) -> list[Token]:
        """Return every token of the code portion of `lines`, in order."""
        ...


def lines_codePortion(lines: list[str]) -> list[str]:
    """Lines up to (not including) the first bare `{TAG}` line."""
    code: list[str] = []
    for line in lines:
        if line_isBareTag(line):
            break
        code.append(line)
    return code


def amount_build(m: re.Match, line: int) -> Token:
    default: str = m.group("default") or ""
    type_s: str = (m.group("type") or "HEX").upper()
    endian_s: str = (m.group("endian") or "BIG").upper()
    if not default:
        default = AMOUNT_DEFAULT
    elif default.upper() == "NA":
        default = "NA"
    return Token(
        kind=TokenKind.AMOUNT,
        name="AMOUNT",
        line=line,
        start=m.start(),
        end=m.end(),
        default=default,
        type=AmountType(type_s),
        endian=Endian(endian_s),
    )


class RegexTokenScanner:
    """Token scanner built on two regular expressions."""

    def scan(self: Self, lines: list[str]) -> list[Token]:
        tokens: list[Token] = []
        for i, line in enumerate(lines_codePortion(lines)):
            found: list[Token] = [amount_build(m, i) for m in _amount_re.finditer(line)]
            for m in _named_re.finditer(line):
                if m.group("name").upper() == "AMOUNT":
                    continue
                found.append(
                    Token(
                        kind=TokenKind.NAMED,
                        name=m.group("name"),
                        line=i,
                        start=m.start(),
                        end=m.end(),
                    )
                )
            tokens.extend(sorted(found, key=lambda t: t.start))
        return tokens


def token_first(
    scanner: TokenScanner, lines: list[str], kind: Optional[TokenKind] = None
) -> Optional[Token]:
    """First token of `kind` (any kind when None), line then column."""
    for token in scanner.scan(lines):
        if kind is None or token.kind == kind:
            return token
    return None


def tokens_ofKind(scanner: TokenScanner, lines: list[str], kind: TokenKind) -> list[Token]:
    return [t for t in scanner.scan(lines) if t.kind == kind]


def token_splice(line: str, token: Token, replacement: str) -> str:
    """Replace exactly the `{...}` span of `token` in `line`."""
    return line[: token.start] + replacement + line[token.end:]


def token_remove(line: str, token: Token) -> str:
    return token_splice(line, token, "")


@runtime_checkable
class TokenResolver(Protocol):
    """Protocol defining the resolver interface for token replacement.

    Resolvers turn the value chosen for one token into the text spliced in
    its place. They report failure through the ParseResult instead of
    raising, so one bad answer never affects other tokens.
    """

    def resolve(self: Self, token: Token, value: object) -> ParseResult:
        """Compute the replacement for `token`.

        Args:
            token: Token being resolved
            value: Caller-supplied answer (an OptionRow, AmountInput or text)

        Returns:
            ParseResult containing:
                - text: Replacement text if successful
                - label: Human label for the block name suffix
                - error: Error message if resolution failed
                - success: Whether resolution succeeded
        """
        ...
