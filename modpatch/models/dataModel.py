"""
dataModel.py

This module defines the data models and schemas used throughout the MODPATCH
application. The models leverage Pydantic for validation and type safety.

Features:
- Enum classes for token kinds, encodings, byte orders and step outcomes.
- Models for parsed documents, code blocks and option tables.
- Token and encoding descriptors used by the scanner and encoder.
- Result models returned across component seams instead of exceptions.

Usage:
Import these models to validate and structure data used in the application.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum
from dataclasses import dataclass


class TokenKind(Enum):
    """
    Enum for placeholder token kinds.
    """

    NAMED = "named"
    AMOUNT = "amount"


class AmountType(Enum):
    """
    Enum for the value encodings an AMOUNT token may request.
    """

    HEX = "HEX"
    FLOAT = "FLOAT"
    ABC123 = "ABC123"
    UTF08 = "UTF08"
    UTF16 = "UTF16"


class Endian(Enum):
    """
    Enum for byte order; TXT means literal text insertion.
    """

    BIG = "BIG"
    LITTLE = "LITTLE"
    TXT = "TXT"


class ValueRadix(Enum):
    """
    How a typed numeric answer is to be read.

    Attributes:
        DEC: Unsigned decimal integer (the usual path)
        HEX: Hexadecimal literal, optionally prefixed with 0x
    """

    DEC = "dec"
    HEX = "hex"


class StepOutcome(Enum):
    """
    Outcome of one resolution step or of a whole fill flow.
    """

    RESOLVED = "resolved"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"
    ABORTED = "aborted"
    NO_TOKENS = "no_tokens"
    FAILED = "failed"
    RESTORED = "restored"
    RESTORE_MISS = "restore_miss"


@dataclass(frozen=True)
class Token:
    """A placeholder found in one code line.

    Tokens are never stored; offsets shift as soon as a line is mutated,
    so they are recomputed by the scanner after every edit.

    Attributes:
        kind: NAMED or AMOUNT
        name: Table name for NAMED tokens, "AMOUNT" otherwise
        line: Index of the line inside the block
        start: Offset of the opening brace
        end: Offset just past the closing brace
        default: Default literal of an AMOUNT token ("00000000" when absent)
        type: Requested encoding of an AMOUNT token
        endian: Requested byte order of an AMOUNT token
    """

    kind: TokenKind
    name: str
    line: int
    start: int
    end: int
    default: str = ""
    type: Optional[AmountType] = None
    endian: Optional[Endian] = None

    @property
    def span(self) -> tuple[int, int]:
        return self.start, self.end


class EncodingSpec(BaseModel):
    """Resolved encoding for one AMOUNT token instance.

    Attributes:
        type: Value encoding
        endian: Byte order (or TXT)
        width: Output width in bytes for numeric encodings (1..8)
        max_length: Character limit for text encodings, None if unlimited
        max_value: Numeric ceiling for integer encodings, None if not numeric
        default: Default literal copied from the token
        initial: Value suggested to the user, derived from the default
        selectable: Whether the user may override type and byte order
    """

    type: AmountType = AmountType.HEX
    endian: Endian = Endian.BIG
    width: int = Field(default=4, ge=1, le=8)
    max_length: Optional[int] = None
    max_value: Optional[int] = None
    default: str = "00000000"
    initial: str = ""
    selectable: bool = True


class AmountInput(BaseModel):
    """A typed answer for an AMOUNT token.

    Attributes:
        text: Raw text as entered
        radix: How numeric text is read
        type: Optional type override (honoured only when selectable)
        endian: Optional byte-order override (honoured only when selectable)
    """

    text: str
    radix: ValueRadix = ValueRadix.DEC
    type: Optional[AmountType] = None
    endian: Optional[Endian] = None


class OptionRow(BaseModel):
    """One selectable row of an option table.

    Attributes:
        cells: Trimmed cells, fitted to the table's column count
    """

    cells: list[str] = Field(default_factory=list)

    @property
    def value(self) -> str:
        return self.cells[0] if self.cells else ""

    @property
    def name(self) -> str:
        return self.cells[1] if len(self.cells) > 1 else ""

    def label(self, fallback: str) -> str:
        """Human label for a chosen row: its name cell, else the fallback."""
        return self.name or fallback


class OptionTable(BaseModel):
    """A named lookup table used to resolve NAMED tokens.

    Attributes:
        name: Table identifier as written in the file
        headers: Ordered column titles
        rows: Ordered rows
    """

    name: str
    headers: list[str] = Field(default_factory=lambda: ["Value"])
    rows: list[OptionRow] = Field(default_factory=list)

    def richer_than(self, other: "OptionTable") -> bool:
        """More columns wins; on a tie, more rows wins."""
        if len(self.headers) != len(other.headers):
            return len(self.headers) > len(other.headers)
        return len(self.rows) > len(other.rows)


class CodeBlock(BaseModel):
    """
    Model for one `[header]` section of a patch file.

    Attributes:
        name (str): Display name; resolution appends labels to it.
        ordinal (int): 1-based position in file order, never reassigned.
        lines (list[str]): Ordered body lines, mutated by resolution.
    """

    name: str
    ordinal: int = Field(..., ge=1, frozen=True)
    lines: list[str] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class Document(BaseModel):
    """
    Model for a parsed patch file.

    Attributes:
        id (str): Title id from the first header comment, e.g. CUSA01234.
        title (str): Game title from the second header comment.
        platform (str): Platform tag split off the title, e.g. PS4.
        source (str): Value of a `;source:` directive.
        metadata (list[str]): Metadata lines in file order.
        blocks (list[CodeBlock]): Code blocks in file order.
    """

    id: str = ""
    title: str = ""
    platform: str = ""
    source: str = ""
    metadata: list[str] = Field(default_factory=list)
    blocks: list[CodeBlock] = Field(default_factory=list)

    def block_get(self, ordinal: int) -> Optional[CodeBlock]:
        for block in self.blocks:
            if block.ordinal == ordinal:
                return block
        return None


class ParseResult(BaseModel):
    """Result of a parsing or encoding operation.

    Attributes:
        text: The produced text (hex bytes, literal text or option value)
        error: Optional error message if the operation failed
        success: Whether the operation succeeded
        label: Optional human label describing the value
    """

    text: str
    error: str | None
    success: bool
    label: str | None = None


class StepResult(BaseModel):
    """Result of one resolution step against a code block.

    Attributes:
        outcome: What happened
        token: Name of the token involved, if any
        text: Spliced replacement text, if any
        error: Reason for FAILED, ABORTED or RESTORE_MISS outcomes
    """

    outcome: StepOutcome
    token: str | None = None
    text: str | None = None
    error: str | None = None


class FlowResult(BaseModel):
    """Result of the open-values flow for one code block.

    Attributes:
        outcome: Final outcome of the flow
        steps: Every step taken, in order
    """

    outcome: StepOutcome
    steps: list[StepResult] = Field(default_factory=list)

    @property
    def resolved(self) -> int:
        return sum(1 for s in self.steps if s.outcome == StepOutcome.RESOLVED)
