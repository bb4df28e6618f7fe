from pydantic_settings import BaseSettings, SettingsConfigDict

from hookbridge.schemas.filters import BranchFilterType, BuildInstructionFilterType


class Settings(BaseSettings):
    base_url: str = "http://localhost:8000"
    database_url: str = "postgresql+psycopg://postgres:postgres@db:5432/hookbridge"
    debug: bool = False
    gitee_api_url: str = "https://gitee.com/api/v5"
    gitee_token: str = "test_gitee_token"
    gitee_webhook_secret: str = "test_webhook_secret"
    sentry_dsn: str | None = None

    note_regex: str = "Jenkins please retry a build"
    ci_skip_for_test_not_required: bool = False
    cancel_incomplete_build_on_same_pull_request: bool = False
    skip_last_commit_has_been_build: bool = False
    build_instruction_filter_type: BuildInstructionFilterType = (
        BuildInstructionFilterType.CI_SKIP
    )

    branch_filter_type: BranchFilterType = BranchFilterType.ALL
    include_branches_spec: str = ""
    exclude_branches_spec: str = ""
    target_branch_regex: str = ""
    include_pull_request_labels: str = ""
    exclude_pull_request_labels: str = ""

    publish_pull_request_notes: bool = True
    status_context: str = "hookbridge"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
