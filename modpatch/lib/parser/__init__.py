"""
Parser package for MODPATCH token scanning and resolution.

Provides the token scanner contract, its regex implementation and the
resolvers that compute replacement text for each token kind.
"""

from .base import (
    RegexTokenScanner,
    TokenResolver,
    TokenScanner,
    token_first,
    token_remove,
    token_splice,
    tokens_ofKind,
)
from .resolvers import AmountResolver, NamedResolver, amountInput_fromText

__all__ = [
    "RegexTokenScanner",
    "TokenResolver",
    "TokenScanner",
    "token_first",
    "token_remove",
    "token_splice",
    "tokens_ofKind",
    "AmountResolver",
    "NamedResolver",
    "amountInput_fromText",
]
