"""HTTP client for the learning content and achievement endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Set, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .config import Settings
from .errors import ContentSyncError, NetworkError, PayloadError
from .models import Achievement, Module, Topic, UserProgress, normalize_difficulty
from .telemetry import Telemetry

logger = logging.getLogger(__name__)

MODULES_PATH = "/api/children-modules"
ACHIEVEMENTS_PATH = "/achievements"
USER_ACHIEVEMENTS_PATH = "/achievements/user/{user_id}"

T = TypeVar("T")


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of one fetch: either ``value`` or ``error`` is set, never both."""

    value: Optional[T] = None
    error: Optional[ContentSyncError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "FetchResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ContentSyncError) -> "FetchResult[T]":
        return cls(error=error)


class UserProgressPayload(BaseModel):
    percentage: Optional[float] = None


class ModulePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    title: str
    module_type: str = Field(alias="moduleType")
    topics: Optional[List[Any]] = None
    difficulty: Optional[Any] = None
    user_progress: Optional[UserProgressPayload] = Field(default=None, alias="userProgress")

    def to_domain(self) -> Module:
        topics: List[Topic] = []
        for raw in self.topics or []:
            if isinstance(raw, dict):
                extra = {key: value for key, value in raw.items() if key not in ("_id", "title", "topic_id")}
                topic_id = raw.get("_id")
                title = raw.get("title")
                topics.append(
                    Topic(
                        topic_id=topic_id if isinstance(topic_id, str) else None,
                        title=title if isinstance(title, str) else None,
                        **extra,
                    )
                )
            elif isinstance(raw, str):
                topics.append(Topic(topic_id=raw))
        progress = None
        if self.user_progress is not None:
            progress = UserProgress(percentage=self.user_progress.percentage)
        return Module(
            id=self.id,
            title=self.title,
            category=self.module_type,
            topics=topics,
            difficulty=normalize_difficulty(self.difficulty),
            user_progress=progress,
        )


class ModuleListPayload(BaseModel):
    modules: List[ModulePayload] = Field(default_factory=list)


class ModuleEnvelopePayload(BaseModel):
    success: bool
    data: Optional[ModuleListPayload] = None


class AchievementPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str = ""
    description: str = ""
    symbol: Optional[str] = None
    color: Optional[str] = None

    def to_domain(self) -> Achievement:
        return Achievement(
            id=self.id,
            name=self.name,
            description=self.description,
            symbol=self.symbol or "",
            color=self.color or "",
        )


class UserAchievementPayload(BaseModel):
    achievement: Union[str, Dict[str, Any]]

    def achievement_id(self) -> Optional[str]:
        if isinstance(self.achievement, str):
            return self.achievement
        nested = self.achievement.get("_id")
        return nested if isinstance(nested, str) else None


_achievement_list = TypeAdapter(List[AchievementPayload])
_user_achievement_list = TypeAdapter(List[UserAchievementPayload])


class ContentFetcher:
    """Performs the network calls behind a dashboard refresh.

    Every public method returns a :class:`FetchResult` and never raises: transport
    failures and timeouts become :class:`NetworkError`, bad status codes, bodies
    that are not JSON, bodies of the wrong shape and ``success: false`` envelopes
    become :class:`PayloadError`. Any other error raised while decoding a
    response is also reported as :class:`PayloadError`. Nothing is retried or
    cached here.

    Pass either ``client`` (used as is and left open by :meth:`aclose`) or
    ``transport`` (wrapped in a client this fetcher owns), not both.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        telemetry: Optional[Telemetry] = None,
    ) -> None:
        if client is not None and transport is not None:
            raise ValueError("Pass either an httpx client or a transport, not both.")
        self._base_url = settings.api_base_url.rstrip("/")
        self._telemetry = telemetry or Telemetry()
        headers: Dict[str, str] = {"Accept": "application/json"}
        if settings.api_token:
            headers["Authorization"] = f"Bearer {settings.api_token}"
        self._headers = headers
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.request_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_modules(self) -> FetchResult[List[Module]]:
        async def _load() -> List[Module]:
            body = await self._get_json(MODULES_PATH, headers={"Cache-Control": "no-cache"})
            try:
                envelope = ModuleEnvelopePayload.model_validate(body)
            except ValidationError as exc:
                raise PayloadError(f"Module listing has unexpected shape: {exc}", endpoint=MODULES_PATH) from exc
            if not envelope.success:
                raise PayloadError("Module listing reported success=false.", endpoint=MODULES_PATH)
            if envelope.data is None:
                raise PayloadError("Module listing is missing its data block.", endpoint=MODULES_PATH)
            return [module.to_domain() for module in envelope.data.modules]

        return await self._run("modules", MODULES_PATH, _load)

    async def fetch_achievements(self) -> FetchResult[List[Achievement]]:
        async def _load() -> List[Achievement]:
            body = await self._get_json(ACHIEVEMENTS_PATH)
            try:
                parsed = _achievement_list.validate_python(body)
            except ValidationError as exc:
                raise PayloadError(f"Achievement listing has unexpected shape: {exc}", endpoint=ACHIEVEMENTS_PATH) from exc
            return [achievement.to_domain() for achievement in parsed]

        return await self._run("achievements", ACHIEVEMENTS_PATH, _load)

    async def fetch_user_achievements(self, user_id: str) -> FetchResult[Set[str]]:
        path = USER_ACHIEVEMENTS_PATH.format(user_id=quote(user_id, safe=""))

        async def _load() -> Set[str]:
            body = await self._get_json(path)
            try:
                parsed = _user_achievement_list.validate_python(body)
            except ValidationError as exc:
                raise PayloadError(f"User achievements have unexpected shape: {exc}", endpoint=path) from exc
            earned: Set[str] = set()
            for record in parsed:
                achievement_id = record.achievement_id()
                if achievement_id:
                    earned.add(achievement_id)
                else:
                    logger.debug("Skipping user achievement without an id (user_id=%s)", user_id)
            return earned

        return await self._run("user_achievements", path, _load)

    async def _run(
        self,
        resource: str,
        path: str,
        loader: Callable[[], Awaitable[T]],
    ) -> FetchResult[T]:
        self._telemetry.emit("fetch_started", resource=resource, endpoint=path)
        started = perf_counter()
        try:
            value = await loader()
        except ContentSyncError as exc:
            return self._failure(resource, path, exc, started)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while fetching %s", resource)
            wrapped = PayloadError(f"{path} could not be processed: {exc!r}", endpoint=path)
            wrapped.__cause__ = exc
            return self._failure(resource, path, wrapped, started)

        latency_ms = int((perf_counter() - started) * 1000)
        count = len(value) if hasattr(value, "__len__") else None
        self._telemetry.emit(
            "fetch_completed",
            resource=resource,
            endpoint=path,
            status="success",
            count=count,
            latency_ms=latency_ms,
        )
        return FetchResult.success(value)

    def _failure(
        self,
        resource: str,
        path: str,
        exc: ContentSyncError,
        started: float,
    ) -> FetchResult[Any]:
        latency_ms = int((perf_counter() - started) * 1000)
        logger.warning("Fetch of %s failed (%s): %s", resource, exc.kind, exc)
        self._telemetry.emit(
            "fetch_completed",
            resource=resource,
            endpoint=path,
            status="failure",
            error_kind=exc.kind,
            latency_ms=latency_ms,
        )
        return FetchResult.failure(exc)

    async def _get_json(self, path: str, *, headers: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self._base_url}{path}"
        request_headers = dict(self._headers)
        if headers:
            request_headers.update(headers)
        try:
            response = await self._client.get(url, headers=request_headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise PayloadError(
                f"{path} answered with HTTP {exc.response.status_code}",
                endpoint=path,
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"{path} is unreachable: {exc}", endpoint=path) from exc

        try:
            return response.json()
        except (ValueError, RecursionError) as exc:
            raise PayloadError(f"{path} returned a body that is not JSON", endpoint=path) from exc


__all__ = [
    "ACHIEVEMENTS_PATH",
    "ContentFetcher",
    "FetchResult",
    "MODULES_PATH",
    "ModuleEnvelopePayload",
    "USER_ACHIEVEMENTS_PATH",
]
