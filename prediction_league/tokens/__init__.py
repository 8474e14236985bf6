"""Short-lived token lifecycle."""

from prediction_league.tokens.service import TOKEN_VALIDITY, TokenAgent, TokenType

__all__ = ["TOKEN_VALIDITY", "TokenAgent", "TokenType"]
