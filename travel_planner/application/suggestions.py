"""
AI activity suggestions for a trip.

The prompt names the destination, the lodging, the titles to avoid (the
trip's existing activities plus suggestions already shown) and one
randomly picked mood, so that repeated requests vary. The model must
answer with a JSON array of suggestion objects.
"""
import logging
import random
from typing import Any, Callable, Iterable, Optional
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.access import require_day_access, require_trip_access
from travel_planner.application.activities import activity_service
from travel_planner.config import settings, Settings
from travel_planner.domain.errors import ExternalServiceError, NotFoundError
from travel_planner.domain.models import ActivityCategory
from travel_planner.domain.schemas import ActivitySuggestion, SuggestionRequest, SuggestionsResponse
from travel_planner.infrastructure.llm_client import LLMClient, get_suggestion_llm_client

logger = logging.getLogger(__name__)

MOODS = [
    "hidden gems that locals love",
    "relaxing and slow-paced",
    "adventurous and active",
    "cultural and historical",
    "romantic",
    "foodie experiences",
    "family friendly",
    "off the beaten path",
    "budget friendly",
    "nightlife and evening fun",
]

SYSTEM_PROMPT = (
    "You are a travel assistant that suggests concrete activities for a trip. "
    "Always answer with a JSON array only, no prose."
)

CATEGORY_ALIASES = {
    "museum": ActivityCategory.CULTURE,
    "history": ActivityCategory.CULTURE,
    "sightseeing": ActivityCategory.CULTURE,
    "restaurant": ActivityCategory.FOOD,
    "drink": ActivityCategory.FOOD,
    "nightlife": ActivityCategory.LEISURE,
    "nature": ActivityCategory.LEISURE,
    "shopping": ActivityCategory.LEISURE,
    "accommodation": ActivityCategory.HOTEL,
}


def build_prompt(
    destination: str,
    lodging: Optional[str],
    exclude_titles: Iterable[str],
    mood: str,
    count: int,
) -> str:
    excluded = sorted({t.strip() for t in exclude_titles if t and t.strip()}, key=str.lower)
    lines = [
        f"Suggest {count} activities for a trip to {destination}.",
        f"The travellers are staying at: {lodging}." if lodging else "The lodging is not decided yet.",
        f"Mood of the suggestions: {mood}.",
    ]
    if excluded:
        lines.append("Do not suggest any of these, they are already planned or shown: " + "; ".join(excluded) + ".")
    lines.append(
        f"Answer with a JSON array of exactly {count} objects with the keys "
        '"title" (string), "description" (one sentence), "duration_minutes" (integer), '
        '"cost_estimate" (string, e.g. "Free" or "15 EUR") and '
        '"category" (one of: ' + ", ".join(c.value for c in ActivityCategory) + ")."
    )
    return "\n".join(lines)


def _category(value: Any) -> ActivityCategory:
    text = str(value or "").strip().lower()
    try:
        return ActivityCategory(text)
    except ValueError:
        return CATEGORY_ALIASES.get(text, ActivityCategory.CULTURE)


def _duration(value: Any) -> int:
    try:
        minutes = int(float(value))
    except (TypeError, ValueError):
        return 60
    return min(max(minutes, 0), 24 * 60)


def parse_suggestions(payload: Any, exclude_titles: Iterable[str] = ()) -> list[ActivitySuggestion]:
    """
    Turn the model's JSON into suggestions.

    Accepts a bare array or an object wrapping it under "suggestions".
    Older key names ("duration", "cost") are accepted too. Items without a
    title, and titles the user already has, are dropped.

    Raises:
        ExternalServiceError: payload is not a list of objects
    """
    if isinstance(payload, dict):
        payload = payload.get("suggestions", payload.get("activities"))
    if not isinstance(payload, list):
        raise ExternalServiceError("AI suggestions came back in an unexpected format.")

    seen = {t.strip().lower() for t in exclude_titles if t}
    suggestions = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        title = str(item.get("title") or "").strip()
        if not title or title.lower() in seen:
            continue
        seen.add(title.lower())
        try:
            suggestions.append(ActivitySuggestion(
                title=title,
                description=(str(item.get("description") or "").strip() or None),
                duration_minutes=_duration(item.get("duration_minutes", item.get("duration"))),
                cost_estimate=(str(item.get("cost_estimate", item.get("cost")) or "").strip() or None),
                category=_category(item.get("category")),
            ))
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed suggestion {title!r}: {e}")

    if not suggestions:
        raise ExternalServiceError("AI returned no usable suggestions.")
    return suggestions


class ActivitySuggester:
    """Asks the LLM for activity ideas."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        rng: Optional[random.Random] = None,
        app_settings: Optional[Settings] = None,
        client_factory: Callable[[], LLMClient] = get_suggestion_llm_client,
    ):
        self._settings = app_settings or settings
        self._llm = llm_client
        self._client_factory = client_factory
        self._rng = rng or random.Random()

    @property
    def llm(self) -> LLMClient:
        if self._llm is None:
            # Raises ServiceUnavailableError when no provider key is configured
            self._llm = self._client_factory()
        return self._llm

    def pick_mood(self) -> str:
        return self._rng.choice(MOODS)

    async def suggest(
        self,
        destination: str,
        lodging: Optional[str],
        existing_titles: Iterable[str] = (),
        already_suggested: Iterable[str] = (),
    ) -> tuple[str, list[ActivitySuggestion]]:
        """
        Returns:
            (mood, suggestions)

        Raises:
            ServiceUnavailableError: AI not configured
            ExternalServiceError: provider failure or malformed answer
        """
        exclude = list(existing_titles) + list(already_suggested)
        mood = self.pick_mood()
        count = self._settings.suggestion_count
        prompt = build_prompt(destination, lodging, exclude, mood, count)

        llm = self.llm
        try:
            payload = await llm.generate_structured(prompt, system_prompt=SYSTEM_PROMPT, max_tokens=1024)
        except ValueError as e:
            logger.warning(f"Malformed AI suggestions for {destination}: {e}")
            raise ExternalServiceError("AI suggestions could not be read, please try again.")
        except Exception as e:
            logger.exception(f"AI suggestion request failed for {destination}")
            raise ExternalServiceError(f"AI suggestions are unavailable: {e}")

        suggestions = parse_suggestions(payload, exclude)[:count]
        logger.info(f"{len(suggestions)} AI suggestions for {destination} ({mood})")
        return mood, suggestions


def get_activity_suggester() -> ActivitySuggester:
    """FastAPI dependency; tests override it with a suggester around a fake LLM."""
    return ActivitySuggester()


async def suggest_for_trip(
    db: AsyncSession,
    trip_id: UUID,
    user_id: UUID,
    request: SuggestionRequest,
    suggester: Optional[ActivitySuggester] = None,
) -> SuggestionsResponse:
    """Suggestions for a trip the user can edit, avoiding every title already planned."""
    trip, _ = await require_trip_access(db, trip_id, user_id)
    if request.day_id is not None:
        day, _, _ = await require_day_access(db, request.day_id, user_id)
        if day.trip_id != trip.id:
            raise NotFoundError("Day not found")

    existing = await activity_service.list_trip_activities(db, trip.id)
    mood, suggestions = await (suggester or get_activity_suggester()).suggest(
        destination=trip.destination,
        lodging=trip.lodging_name,
        existing_titles=[a.title for a in existing],
        already_suggested=request.already_suggested,
    )
    return SuggestionsResponse(mood=mood, suggestions=suggestions)
