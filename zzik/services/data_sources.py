"""
Popup Data Sources - ZZIK Scoring Service
zzik/services/data_sources.py

The recommendation service reads users, popups and participations through
the PopupDataSource protocol. InMemoryPopupDataSource is the reference
adapter; it can be seeded from a JSON file shaped like:

    {
      "popups": [{"id": "p1", "category": "fashion", "current_participants": 40,
                  "goal_participants": 100, "created_at": "...", "deadline_at": "...",
                  "location": "Seongsu", "status": "funding"}],
      "users": {"u1": {"categories": {"fashion": 0.8}, "vibes": [], ...}},
      "participations": {"u1": ["p1"], "u2": ["p1", "p2"]}
    }
"""

import json
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Set

import structlog

from zzik.core.exceptions import DataSourceException
from zzik.models.popup import PopupFeatures, UserPreferences
from zzik.scoring.recommendation import derive_category_weights

logger = structlog.get_logger(__name__)

# Popups still collecting participants
ACTIVE_STATUSES = frozenset({"funding", "confirmed"})
SECONDS_PER_DAY = 24 * 60 * 60


class PopupDataSource(Protocol):
    """Read-only access to profiles, the candidate feed and participations."""

    def get_user_preferences(self, user_id: str) -> Optional[UserPreferences]:
        ...

    def list_available_popups(self, exclude_ids: Iterable[str] = ()) -> List[PopupFeatures]:
        ...

    def get_participations(self) -> Dict[str, Set[str]]:
        ...


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def popup_features_from_record(record: Mapping[str, Any], now: Optional[datetime] = None) -> PopupFeatures:
    """
    Convert a stored popup row to the scorer's snapshot.

    days_left = ceil((deadline_at - now) / 1 day), floored at 0
    momentum  = current_participants / days active (at least 1 day), rounded
    """
    now = now or datetime.now(timezone.utc)
    participants = int(record.get("current_participants", record.get("participant_count", 0)) or 0)

    deadline = _parse_datetime(record.get("deadline_at"))
    if deadline is not None:
        days_left = max(0, math.ceil((deadline - now).total_seconds() / SECONDS_PER_DAY))
    else:
        days_left = int(record.get("days_left", 0) or 0)

    created = _parse_datetime(record.get("created_at"))
    if created is not None:
        days_active = max(1, math.ceil((now - created).total_seconds() / SECONDS_PER_DAY))
        momentum = float(round(participants / days_active))
    else:
        momentum = float(record.get("momentum", 0) or 0)

    return PopupFeatures(
        id=str(record["id"]),
        category=record.get("category", ""),
        participant_count=participants,
        goal_participants=int(record.get("goal_participants", 0) or 0),
        momentum=momentum,
        days_left=days_left,
        location=record.get("location") or "",
        vibe_vector=record.get("vibe_vector") or None,
        leader_id=record.get("leader_id"),
        description=record.get("description"),
    )


class InMemoryPopupDataSource:
    """PopupDataSource backed by plain dicts."""

    def __init__(
        self,
        popups: Optional[List[Mapping[str, Any]]] = None,
        users: Optional[Mapping[str, UserPreferences]] = None,
        participations: Optional[Mapping[str, Iterable[str]]] = None,
        now: Optional[datetime] = None,
    ) -> None:
        self._popups = list(popups or [])
        self._users = dict(users or {})
        self._participations = {
            user_id: set(popup_ids) for user_id, popup_ids in (participations or {}).items()
        }
        self._now = now

    @classmethod
    def from_json_file(cls, path: str, now: Optional[datetime] = None) -> "InMemoryPopupDataSource":
        """Load a seed file; a missing or malformed file raises DataSourceException."""
        # pydantic's ValidationError is a ValueError
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
            users = {
                user_id: UserPreferences(**prefs)
                for user_id, prefs in raw.get("users", {}).items()
            }
            source = cls(
                popups=raw.get("popups", []),
                users=users,
                participations=raw.get("participations", {}),
                now=now,
            )
        except (OSError, ValueError, TypeError, AttributeError) as e:
            raise DataSourceException("load_seed", f"Cannot read seed file {path}: {e}") from e

        logger.info(
            "seed_data_loaded",
            path=path,
            popups=len(source._popups),
            users=len(users),
        )
        return source

    def get_user_preferences(self, user_id: str) -> Optional[UserPreferences]:
        """
        Stored profile with its history filled from participations.

        A user with participations but no stored profile gets one built from
        the joined popups' categories; a user with neither gets None.
        """
        prefs = self._users.get(user_id)
        history = self._participations.get(user_id)
        if prefs is None:
            if not history:
                return None
            joined = [
                str(record.get("category", ""))
                for record in self._popups
                if str(record.get("id")) in history
            ]
            return UserPreferences(
                categories=derive_category_weights(joined),
                participation_history=sorted(history),
            )
        if history and not prefs.participation_history:
            prefs = prefs.model_copy(update={"participation_history": sorted(history)})
        return prefs

    def list_available_popups(self, exclude_ids: Iterable[str] = ()) -> List[PopupFeatures]:
        excluded = set(exclude_ids)
        return [
            popup_features_from_record(record, self._now)
            for record in self._popups
            if str(record.get("id")) not in excluded
            and record.get("status", "funding") in ACTIVE_STATUSES
        ]

    def get_participations(self) -> Dict[str, Set[str]]:
        return {user_id: set(popup_ids) for user_id, popup_ids in self._participations.items()}
