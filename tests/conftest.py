from __future__ import annotations

import json

import pytest

from core.domain.models import AppContext, AttemptResult, HostSpec, UserContext

VERSIONS_BODY = json.dumps(
    [
        {"ProductCode": "lp", "LatestVersion": "1.46", "SupportedVersions": ["1.45", "1.46"]},
        {"ProductCode": "le", "LatestVersion": "1.74", "SupportedVersions": ["1.74"]},
    ]
)
SKEW_BODY = "Timestamp out of range: server time 1700000000"
FIXED_NOW_MS = 1_699_999_990_000


class ScriptedTransport:
    """Returns queued results in order, recording every executed request."""

    def __init__(self, results: list[AttemptResult]) -> None:
        self._results = list(results)
        self.requests = []

    def execute(self, request):
        self.requests.append(request)
        if len(self._results) > 1:
            return self._results.pop(0)
        return self._results[0]


@pytest.fixture
def host() -> HostSpec:
    return HostSpec.parse("https://lms.example.edu")


@pytest.fixture
def user_context(host: HostSpec) -> UserContext:
    return AppContext("app-id", "app-key").create_anonymous_user_context(host)


def ok_result(body: str = VERSIONS_BODY) -> AttemptResult:
    return AttemptResult(
        status_code=200,
        reason="OK",
        headers=[("Content-Type", "application/json")],
        body=body,
    )


def skew_result(body: str = SKEW_BODY) -> AttemptResult:
    return AttemptResult(status_code=403, reason="Forbidden", body=body)
