from hookbridge.exceptions import NoRevisionToBuild
from hookbridge.schemas.hooks import CommitCommentEvent, PullRequestCommentEvent


def resolve_revision(event: PullRequestCommentEvent | CommitCommentEvent) -> str:
    """Pick the revision to check out for a note event.

    Pull requests build their merge commit, falling back to the merge
    reference when the host has not computed a merge commit yet. Comments on
    bare commits build the commented commit.
    """
    match event:
        case PullRequestCommentEvent(pull_request=pull_request):
            if pull_request.merge_commit_sha is not None:
                return pull_request.merge_commit_sha
            if pull_request.merge_reference_name is not None:
                return pull_request.merge_reference_name
        case CommitCommentEvent():
            pass

    commit_id = event.comment.commit_id
    if commit_id and commit_id.strip():
        return commit_id

    raise NoRevisionToBuild()
