"""Realm (tenant) configuration."""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from prediction_league.config import Settings
from prediction_league.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class RealmContact(BaseModel):
    """Sender identity and sign-off used on outbound email."""

    sender_name: str = "Prediction League"
    sign_off_name: str = "The Prediction League Team"
    email_do_not_reply: str = "noreply@localhost"
    email_proper: str = "hello@localhost"
    sender_domain: str = "localhost"


class RealmEntryFee(BaseModel):
    amount: float = 0.0
    label: str = ""
    breakdown: list[str] = Field(default_factory=list)


class Realm(BaseModel):
    """A deployment-scoped tenant bound to one season."""

    name: str
    origin: str
    season_id: str
    contact: RealmContact = Field(default_factory=RealmContact)
    entry_fee: RealmEntryFee = Field(default_factory=RealmEntryFee)
    paypal_client_id: Optional[str] = None

    def url(self, path: str) -> str:
        return f"{self.origin.rstrip('/')}/{path.lstrip('/')}"

    @property
    def leaderboard_url(self) -> str:
        return self.url("/leaderboard")

    @property
    def prediction_url(self) -> str:
        return self.url("/prediction")

    def magic_login_url(self, token_id: str) -> str:
        return self.url(f"/login/{token_id}")


class RealmCollection:
    """Read-only lookup of realms by name."""

    def __init__(self, realms: Iterable[Realm]):
        self._realms = {r.name: r for r in realms}

    def get_by_name(self, name: str) -> Realm:
        realm = self._realms.get(name)
        if realm is None:
            raise NotFoundError(f"realm not found: {name}")
        return realm

    def for_season(self, season_id: str) -> list[Realm]:
        return [r for r in self._realms.values() if r.season_id == season_id]

    def validate_seasons(self, season_ids: Iterable[str]) -> None:
        known = set(season_ids)
        unknown = [f"realm {r.name}: unknown season {r.season_id}" for r in self if r.season_id not in known]
        if unknown:
            raise ValidationError(unknown, fields=["season_id"])

    def __iter__(self):
        return iter(self._realms.values())

    def __len__(self) -> int:
        return len(self._realms)


def load_realms(settings: Settings) -> RealmCollection:
    """Load realms from ``REALMS_PATH`` or build the single default realm."""
    if settings.REALMS_PATH:
        raw = json.loads(Path(settings.REALMS_PATH).read_text())
        realms = []
        for item in raw:
            item.setdefault("paypal_client_id", settings.PAYPAL_CLIENT_ID)
            realms.append(Realm.model_validate(item))
        logger.info(f"[REALMS] Loaded {len(realms)} realm(s) from {settings.REALMS_PATH}")
        return RealmCollection(realms)

    realm = Realm(
        name=settings.DEFAULT_REALM_NAME,
        origin=settings.DEFAULT_REALM_ORIGIN,
        season_id=settings.DEFAULT_SEASON_ID,
        paypal_client_id=settings.PAYPAL_CLIENT_ID,
    )
    logger.info(f"[REALMS] Using default realm {realm.name} -> season {realm.season_id}")
    return RealmCollection([realm])
