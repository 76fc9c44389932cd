from .hint import Hint, Token
from .person import PersonRef
from .text import TextContext, TextSpan, Triple

__all__ = [
    "Hint",
    "PersonRef",
    "TextContext",
    "TextSpan",
    "Token",
    "Triple",
]
