from hookbridge.jobs.base import Build, Job, RemoteConfig, RevisionMarker
from hookbridge.jobs.database import DatabaseBuild, DatabaseJob

__all__ = [
    "Build",
    "DatabaseBuild",
    "DatabaseJob",
    "Job",
    "RemoteConfig",
    "RevisionMarker",
]
