from prediction_league.clock import Clock
from prediction_league.tokens import TokenAgent


class TokenReaperJob:
    """Deletes tokens that have expired as of the current tick."""

    def __init__(self, tokens: TokenAgent, clock: Clock):
        self.tokens = tokens
        self.clock = clock

    async def run(self) -> int:
        return await self.tokens.reap_expired_as_of(self.clock.now())
