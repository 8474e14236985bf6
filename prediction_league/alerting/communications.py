"""Compose notification emails and push them onto the email queue."""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from prediction_league.alerting.email import Email, Identity
from prediction_league.alerting.queue import EmailQueue
from prediction_league.models import Entry, ScoredEntryPrediction, Standings
from prediction_league.realms import Realm, RealmCollection
from prediction_league.seasons import SeasonCollection, SequencedTimeFrame
from prediction_league.teams import TeamCollection

logger = logging.getLogger(__name__)

SUBJECT_ROUND_COMPLETE = "End of Round {round_number}"
SUBJECT_FINAL_ROUND_COMPLETE = "Season Complete! Final Round {round_number}"
SUBJECT_WINDOW_OPEN = "Prediction Window Open!"
SUBJECT_WINDOW_OPEN_FINAL = "Prediction Window Open (Last Chance!)"
SUBJECT_WINDOW_CLOSING = "Prediction Window Closing Soon!"
SUBJECT_WINDOW_CLOSING_FINAL = "Prediction Window Closing Soon (Last Chance!)"
SUBJECT_MAGIC_LOGIN = "Your Login Link"


class CommunicationsAgent:
    """Builds plain-text emails for entrants."""

    def __init__(
        self,
        queue: EmailQueue,
        realms: RealmCollection,
        seasons: SeasonCollection,
        teams: TeamCollection,
        timezone_name: str = "Europe/London",
    ):
        self.queue = queue
        self.realms = realms
        self.seasons = seasons
        self.teams = teams
        self.tz = ZoneInfo(timezone_name)

    async def issue_round_complete_email(
        self,
        entry: Entry,
        scored: ScoredEntryPrediction,
        standings: Standings,
        final_round: bool = False,
    ) -> None:
        realm = self.realms.get_by_name(entry.realm_name)
        season = self.seasons.get_by_id(entry.season_id)

        template = SUBJECT_FINAL_ROUND_COMPLETE if final_round else SUBJECT_ROUND_COMPLETE
        subject = template.format(round_number=standings.round_number)

        if final_round:
            intro = f"The {season.name} season is over! Here's how your final prediction scored:"
            outro = f"See where you finished: {realm.leaderboard_url}"
        else:
            intro = f"Round {standings.round_number} of {season.name} is complete. Here's how your prediction scored:"
            outro = f"Check the leaderboard: {realm.leaderboard_url}"

        body = f"""Hi {entry.entrant_name},

{intro}

{self._rankings_table(scored, standings)}

Round score: {scored.score}

{outro}
{self._sign_off(realm)}"""

        await self._offer(realm, entry, subject, body)

    async def issue_prediction_window_open_email(self, entry: Entry, window: SequencedTimeFrame) -> None:
        realm = self.realms.get_by_name(entry.realm_name)
        season = self.seasons.get_by_id(entry.season_id)
        subject = SUBJECT_WINDOW_OPEN_FINAL if window.is_last else SUBJECT_WINDOW_OPEN

        body = f"""Hi {entry.entrant_name},

Prediction window {window.count} of {window.total} for {season.name} is now open.

You can update your prediction until {self._format_ts(window.current.until)}.
{self._next_window_line(window)}
Update your prediction: {realm.prediction_url}
{self._sign_off(realm)}"""

        await self._offer(realm, entry, subject, body)

    async def issue_prediction_window_closing_email(self, entry: Entry, window: SequencedTimeFrame) -> None:
        realm = self.realms.get_by_name(entry.realm_name)
        season = self.seasons.get_by_id(entry.season_id)
        subject = SUBJECT_WINDOW_CLOSING_FINAL if window.is_last else SUBJECT_WINDOW_CLOSING

        body = f"""Hi {entry.entrant_name},

Prediction window {window.count} of {window.total} for {season.name} closes {self._format_ts(window.current.until)}.

Make any last changes to your prediction before then.
{self._next_window_line(window)}
Update your prediction: {realm.prediction_url}
{self._sign_off(realm)}"""

        await self._offer(realm, entry, subject, body)

    async def issue_magic_login_email(self, entry: Entry, token_id: str) -> None:
        realm = self.realms.get_by_name(entry.realm_name)

        body = f"""Hi {entry.entrant_name},

Here's your login link. It can only be used once and expires in one hour:

{realm.magic_login_url(token_id)}

If you didn't ask for this, you can ignore this email.
{self._sign_off(realm)}"""

        await self._offer(realm, entry, SUBJECT_MAGIC_LOGIN, body)

    async def _offer(self, realm: Realm, entry: Entry, subject: str, body: str) -> None:
        email = new_email(realm, Identity(entry.entrant_name, entry.entrant_email), subject, body)
        await self.queue.offer(email)
        logger.debug(f"[COMMS] Queued '{subject}' for entry {entry.id}")

    def _rankings_table(self, scored: ScoredEntryPrediction, standings: Standings) -> str:
        actual = {r.id: r.position for r in standings.ranking_items()}
        lines = []
        for ranking in scored.ranking_items():
            name = self.teams.teams[ranking.id].short_name if ranking.id in self.teams else ranking.id
            lines.append(
                f"{ranking.position:>2}. {name:<16} actual {actual.get(ranking.id, '-'):>2}  hit {ranking.score}"
            )
        return "\n".join(lines)

    def _next_window_line(self, window: SequencedTimeFrame) -> str:
        if window.next is None:
            return "This is the last prediction window of the season.\n"
        return f"The next window opens {self._format_ts(window.next.start)}.\n"

    def _format_ts(self, ts: datetime) -> str:
        local = ts.replace(tzinfo=ZoneInfo("UTC")).astimezone(self.tz)
        hour = local.hour % 12 or 12
        meridiem = "am" if local.hour < 12 else "pm"
        return f"{local:%a} {local.day} {local:%B} at {hour}:{local:%M}{meridiem}"

    @staticmethod
    def _sign_off(realm: Realm) -> str:
        return f"""
Cheers,
{realm.contact.sign_off_name}
"""


def new_email(realm: Realm, to: Identity, subject: str, plain_text: str) -> Email:
    return Email(
        sender=Identity(realm.contact.sender_name, realm.contact.email_do_not_reply),
        to=to,
        reply_to=Identity(realm.contact.sender_name, realm.contact.email_proper),
        sender_domain=realm.contact.sender_domain,
        subject=subject,
        plain_text=plain_text,
    )
