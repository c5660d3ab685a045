from __future__ import annotations

import httpx
import pytest

import cli.main
from adapters.http_client import HttpxTransport
from conftest import SKEW_BODY, VERSIONS_BODY
from core.services.response_interpreter import ExitCode

BASE_ARGS = ["--appId", "app-id", "--appKey", "app-key", "--host", "https://lms.example.edu/d2l/home"]


@pytest.fixture
def serve(monkeypatch):
    """Route the CLI's transport to a scripted handler; returns the seen requests."""

    seen: list[httpx.Request] = []

    def install(*responses: httpx.Response) -> list[httpx.Request]:
        queue = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return queue.pop(0) if len(queue) > 1 else queue[0]

        monkeypatch.setattr(
            cli.main,
            "build_transport",
            lambda settings: HttpxTransport(settings, transport=httpx.MockTransport(handler)),
        )
        return seen

    return install


def test_success(serve, capsys):
    seen = serve(httpx.Response(200, text=VERSIONS_BODY))

    assert cli.main.run(BASE_ARGS) == ExitCode.SUCCESS
    out, err = capsys.readouterr()
    assert out == "Ok\n"
    assert err == ""
    assert len(seen) == 1
    assert seen[0].url.path == "/d2l/api/versions/"
    assert seen[0].url.params["x_a"] == "app-id"


@pytest.mark.parametrize("flags", [[], ["-v"], ["-g"], ["-v", "-g"]])
def test_success_control_flow_ignores_flags(serve, flags):
    seen = serve(httpx.Response(200, text=VERSIONS_BODY))
    assert cli.main.run(BASE_ARGS + flags) == 0
    assert len(seen) == 1


def test_success_verbose_prints_body(serve, capsys):
    serve(httpx.Response(200, text=VERSIONS_BODY))
    assert cli.main.run(BASE_ARGS + ["--verbose"]) == 0
    out, _ = capsys.readouterr()
    assert out.startswith("Ok\nResponse headers:\n")
    assert "Response body:\n  " + VERSIONS_BODY in out


def test_skew_then_success(serve, capsys):
    seen = serve(
        httpx.Response(403, text=SKEW_BODY),
        httpx.Response(200, text=VERSIONS_BODY),
    )
    assert cli.main.run(BASE_ARGS + ["-v"]) == 0
    out, _ = capsys.readouterr()
    assert "Making attempt #2" in out
    assert "giving up" not in out
    assert len(seen) == 2
    assert seen[1].url.params["x_t"] == "1700000000"


def test_persistent_skew_verbose(serve, capsys):
    seen = serve(httpx.Response(403, text=SKEW_BODY))
    assert cli.main.run(BASE_ARGS + ["-v"]) == ExitCode.REQUEST_FAILURE
    out, err = capsys.readouterr()
    assert len(seen) == 3
    assert "Too much timestamp skew, giving up." in out
    assert err.startswith("Failure!\n")


def test_persistent_skew_guess(serve, capsys):
    serve(httpx.Response(403, text=SKEW_BODY))
    assert cli.main.run(BASE_ARGS + ["-g"]) == -4
    out, _ = capsys.readouterr()
    assert out == "Timestamp skew could not be rectified.\n"


def test_invalid_token_guess(serve, capsys):
    serve(httpx.Response(403, text="Invalid token"))
    assert cli.main.run(BASE_ARGS + ["-g"]) == -4
    out, _ = capsys.readouterr()
    assert out == "App not synced to LMS or explicitly denied in Manage Extensibility.\n"


def test_server_error_guess(serve, capsys):
    serve(httpx.Response(500))
    assert cli.main.run(BASE_ARGS + ["-g"]) == -4
    out, _ = capsys.readouterr()
    assert out == "Unknown error\n"


def test_not_json(serve, capsys):
    serve(httpx.Response(200, text="not json"))
    assert cli.main.run(BASE_ARGS) == ExitCode.DESERIALIZE_FAILURE
    out, err = capsys.readouterr()
    assert out == ""
    assert "Call succeeded but could not deserialize the response." in err
    assert "Invalid JSON" in err
    assert "Response:\n  not json" in err


def test_missing_required_option_is_declined(serve, capsys):
    seen = serve(httpx.Response(200, text=VERSIONS_BODY))
    assert cli.main.run(["--appId", "app-id", "--host", "lms.example.edu"]) == ExitCode.DECLINED
    _, err = capsys.readouterr()
    assert err.strip()
    assert seen == []


def test_help_is_declined(serve):
    seen = serve(httpx.Response(200, text=VERSIONS_BODY))
    assert cli.main.run(["--help"]) == -1
    assert seen == []


def test_bad_host_is_invalid_arguments(serve, capsys):
    seen = serve(httpx.Response(200, text=VERSIONS_BODY))
    args = ["--appId", "app-id", "--appKey", "app-key", "-h", "ftp://lms.example.edu"]
    assert cli.main.run(args) == ExitCode.INVALID_ARGUMENTS == -2
    _, err = capsys.readouterr()
    assert "Usage:" in err
    assert "Unsupported URL scheme" in err
    assert seen == []


def test_unknown_option_is_declined(serve, capsys):
    seen = serve(httpx.Response(200, text=VERSIONS_BODY))
    assert cli.main.run(BASE_ARGS + ["--bogus"]) == ExitCode.DECLINED
    _, err = capsys.readouterr()
    assert "--bogus" in err
    assert seen == []


def test_server_text_is_written_verbatim(serve, capsys):
    serve(httpx.Response(403, headers={"X-Note": "a\tb"}, text="bad\ttoken\x07 "))
    assert cli.main.run(BASE_ARGS) == ExitCode.REQUEST_FAILURE
    _, err = capsys.readouterr()
    assert "  X-Note: a\tb\n" in err
    assert "Response: \n  bad\ttoken\x07 \n" in err


def test_transport_error_is_guessed_verbatim(monkeypatch, capsys):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused:\there", request=request)

    monkeypatch.setattr(
        cli.main,
        "build_transport",
        lambda settings: HttpxTransport(settings, transport=httpx.MockTransport(handler)),
    )
    assert cli.main.run(BASE_ARGS + ["-g"]) == -4
    out, _ = capsys.readouterr()
    assert out == "refused:\there\n"
