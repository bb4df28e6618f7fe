from hookbridge.schemas.cause import ActionType, BuildStatusUpdate, CauseData
from hookbridge.schemas.hooks import CommitCommentEvent, PullRequestCommentEvent


def build_cause_data(event: PullRequestCommentEvent | CommitCommentEvent) -> CauseData:
    match event:
        case CommitCommentEvent(comment=comment, project=project):
            # Commit comments have no branch; the project is both source and target.
            return CauseData(
                action_type=ActionType.COMMIT_COMMENT,
                user_name=comment.user.username,
                user_email=comment.user.email,
                pull_request_title="",
                branch="",
                source_branch="",
                source_project_id=project.id,
                source_repo_homepage=project.homepage,
                source_repo_name=project.name,
                source_namespace=project.namespace,
                source_repo_url=project.url,
                source_repo_ssh_url=project.ssh_url,
                source_repo_http_url=project.git_http_url,
                target_branch="",
                target_project_id=project.id,
                target_repo_name=project.name,
                target_namespace=project.namespace,
                target_repo_ssh_url=project.ssh_url,
                target_repo_http_url=project.git_http_url,
                triggered_by_user=comment.user.name,
                trigger_phrase=comment.body,
                sha=comment.commit_id,
                path_with_namespace=project.path_with_namespace,
            )
        case PullRequestCommentEvent(comment=comment, pull_request=pr):
            author = pr.head.user
            return CauseData(
                action_type=ActionType.NOTE,
                source_project_id=pr.source_project_id,
                target_project_id=pr.target_project_id,
                branch=pr.source_branch,
                source_branch=pr.source_branch,
                user_name=author.name,
                user_email=author.email,
                source_repo_homepage=pr.source.homepage,
                source_repo_name=pr.source.name,
                source_namespace=pr.source.namespace,
                source_repo_url=pr.source.url,
                source_repo_ssh_url=pr.source.ssh_url,
                source_repo_http_url=pr.source.git_http_url,
                pull_request_title=pr.title,
                pull_request_description=pr.body,
                pull_request_id=pr.id,
                pull_request_iid=pr.number,
                pull_request_target_project_id=pr.target_project_id,
                target_branch=pr.target_branch,
                target_repo_name=pr.target.name,
                target_namespace=pr.target.namespace,
                target_repo_ssh_url=pr.target.ssh_url,
                target_repo_http_url=pr.target.git_http_url,
                triggered_by_user=author.name,
                last_commit=pr.merge_commit_sha,
                sha=pr.merge_commit_sha,
                after=pr.merge_commit_sha,
                ref=pr.merge_reference_name,
                target_project_url=pr.target.url,
                trigger_phrase=comment.body,
                path_with_namespace=pr.base.repo.path_with_namespace,
            )
    raise TypeError(f"Unsupported note event: {type(event).__name__}")


def build_status_update(
    event: PullRequestCommentEvent | CommitCommentEvent,
) -> BuildStatusUpdate:
    match event:
        case PullRequestCommentEvent(pull_request=pr):
            return BuildStatusUpdate(
                project_id=pr.source_project_id,
                sha=pr.merge_commit_sha,
                ref=pr.target_branch,
            )
        case _:
            raise TypeError("Build status updates require a pull request comment")
