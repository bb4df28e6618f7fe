from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import httpx

from hookbridge.exceptions import InvalidRemoteUrl
from hookbridge.schemas.cause import BuildStatusUpdate, CauseData


def normalize_remote_url(url: str) -> str:
    return url.strip().rstrip("/")


@dataclass(frozen=True)
class RemoteConfig:
    name: str
    urls: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_url(cls, name: str | None, url: str | None) -> "RemoteConfig":
        if not url or not url.strip():
            raise InvalidRemoteUrl(url)
        try:
            parsed = httpx.URL(url.strip())
        except httpx.InvalidURL as e:
            raise InvalidRemoteUrl(url) from e
        if not parsed.scheme or not parsed.host:
            raise InvalidRemoteUrl(url)
        return cls(name=name or "origin", urls=(normalize_remote_url(url),))


@dataclass(frozen=True)
class RevisionMarker:
    """Revision a build was started for, and the repository it was fetched from."""

    commit: str
    repo_url: str | None = None

    def can_originate_from(self, remotes: Iterable[RemoteConfig]) -> bool:
        if self.repo_url is None:
            return True
        expected = normalize_remote_url(self.repo_url)
        return any(url == expected for remote in remotes for url in remote.urls)


class Build(ABC):
    @abstractmethod
    def is_building(self) -> bool:
        pass

    @abstractmethod
    def get_revision_marker(self) -> RevisionMarker | None:
        pass

    @abstractmethod
    async def stop(self) -> None:
        pass


class Job(ABC):
    name: str

    @abstractmethod
    def get_builds(self) -> Sequence[Build]:
        pass

    @abstractmethod
    def is_building(self) -> bool:
        pass

    @abstractmethod
    async def schedule_build(
        self,
        revision: RevisionMarker,
        cause: CauseData,
        status_update: BuildStatusUpdate | None = None,
    ) -> str:
        pass
