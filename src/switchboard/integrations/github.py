"""GitHub REST v3: repositories, issues, pull requests."""

from __future__ import annotations

from switchboard.core import CredentialField, Endpoint, Integration, Param, Route
from switchboard.core.endpoints import bearer, comma_join

GITHUB = Integration(
    slug="github",
    title="GitHub",
    base_url="https://api.github.com",
    credentials=(CredentialField("token", env="GITHUB_TOKEN"),),
    auth=bearer("token"),
    headers={
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    },
    endpoints=(
        Endpoint(
            "get_authenticated_user", "GET", "/user",
            fields={"user": None},
            route=Route("GET", "/user"),
        ),
        Endpoint(
            "list_repos", "GET", "/user/repos",
            params=(
                Param("visibility", "query"),
                Param("sort", "query", default="updated"),
                Param("per_page", "query", default=30),
                Param("page", "query"),
            ),
            fields={"repos": None},
            route=Route("GET", "/repos"),
        ),
        Endpoint(
            "get_repo", "GET", "/repos/{owner}/{repo}",
            fields={"repo": None},
            route=Route("GET", "/repos/{owner}/{repo}"),
        ),
        Endpoint(
            "create_repo", "POST", "/user/repos",
            params=(
                Param("name", required=True),
                Param("description"),
                Param("private"),
                Param("auto_init"),
            ),
            fields={"repo": None},
            route=Route("POST", "/repos"),
        ),
        Endpoint(
            "list_issues", "GET", "/repos/{owner}/{repo}/issues",
            params=(
                Param("state", "query", default="open"),
                Param("labels", "query", serialize=comma_join),
                Param("assignee", "query"),
                Param("per_page", "query", default=30),
                Param("page", "query"),
            ),
            fields={"issues": None},
            route=Route("GET", "/repos/{owner}/{repo}/issues"),
        ),
        Endpoint(
            "create_issue", "POST", "/repos/{owner}/{repo}/issues",
            params=(
                Param("title", required=True),
                Param("body"),
                Param("labels"),
                Param("assignees"),
                Param("milestone"),
            ),
            fields={"issue": None},
            route=Route("POST", "/repos/{owner}/{repo}/issues"),
        ),
        Endpoint(
            "update_issue", "PATCH", "/repos/{owner}/{repo}/issues/{issue_number}",
            params=(
                Param("title"),
                Param("body"),
                Param("state"),
                Param("labels"),
                Param("assignees"),
            ),
            fields={"issue": None},
            route=Route("PATCH", "/repos/{owner}/{repo}/issues/{issue_number}"),
        ),
        Endpoint(
            "create_issue_comment", "POST", "/repos/{owner}/{repo}/issues/{issue_number}/comments",
            params=(Param("body", required=True),),
            fields={"comment": None},
            route=Route("POST", "/repos/{owner}/{repo}/issues/{issue_number}/comments"),
        ),
        Endpoint(
            "list_pull_requests", "GET", "/repos/{owner}/{repo}/pulls",
            params=(
                Param("state", "query", default="open"),
                Param("base", "query"),
                Param("per_page", "query", default=30),
            ),
            fields={"pull_requests": None},
            route=Route("GET", "/repos/{owner}/{repo}/pulls"),
        ),
        Endpoint(
            "create_pull_request", "POST", "/repos/{owner}/{repo}/pulls",
            params=(
                Param("title", required=True),
                Param("head", required=True),
                Param("base", required=True),
                Param("body"),
                Param("draft"),
            ),
            fields={"pull_request": None},
            route=Route("POST", "/repos/{owner}/{repo}/pulls"),
        ),
        Endpoint(
            "search_repositories", "GET", "/search/repositories",
            params=(
                Param("q", "query", required=True),
                Param("sort", "query"),
                Param("order", "query"),
                Param("per_page", "query", default=30),
            ),
            fields={"total_count": "total_count", "repos": "items"},
            route=Route("GET", "/search/repositories"),
        ),
    ),
)
