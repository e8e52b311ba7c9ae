from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

import intune_graph
from intune_graph import app
from intune_graph.adapters.memory import InMemoryGraphStore
from intune_graph.config import AuthenticationError
from intune_graph.domain.keys import account_key, device_key
from intune_graph.domain.reconciliation import Fatal, StepReport
from intune_graph.domain.steps import RunResult, StepId
from intune_graph.ui import cli
from tests.helpers.intune import DESKTOP_ID, TENANT_ID, FakeIntuneFetcher, make_config, make_device

if TYPE_CHECKING:
    from pathlib import Path

    from intune_graph.config import IntuneConfig
    from intune_graph.domain.ports import GraphObjectStore


@pytest.fixture
def configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "load_intune_config", lambda **_: make_config())
    monkeypatch.setattr(cli, "verify_graph_access", lambda _config: None)


def test_steps_command_lists_steps_in_order(capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["steps"])

    lines = capsys.readouterr().out.splitlines()
    step_ids = [line.split("\t", 1)[0] for line in lines]
    assert len(step_ids) == len(StepId)
    assert step_ids.index(StepId.FETCH_DEVICES) < step_ids.index(
        StepId.FETCH_DETECTED_APPLICATIONS
    )
    assert lines[step_ids.index(StepId.CREATE_ACCOUNT)].endswith("depends on: -")


def test_sync_without_credentials_exits_with_config_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.delenv("INTUNE_TENANT_ID", raising=False)
    monkeypatch.delenv("GRAPH_ACCESS_TOKEN", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync", "--memory"])

    assert excinfo.value.code == 2


@pytest.mark.usefixtures("configured")
def test_sync_passes_selected_steps(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_ingest(**kwargs: object) -> RunResult:
        captured.update(kwargs)
        return RunResult(reports={})

    monkeypatch.setattr(cli, "ingest_intune", fake_ingest)

    cli.main(["sync", "--memory", "--step", "fetch-devices", "--step", "fetch-users"])

    assert captured["only"] == ["fetch-devices", "fetch-users"]
    assert isinstance(captured["store"], InMemoryGraphStore)


def test_sync_rejects_unknown_step(monkeypatch: pytest.MonkeyPatch) -> None:
    def unreachable(**_: object) -> IntuneConfig:
        raise AssertionError("configuration must not be read for an invalid selection")

    monkeypatch.setattr(cli, "load_intune_config", unreachable)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync", "--memory", "--step", "fetch-everything"])

    assert excinfo.value.code == 2


def test_sync_with_rejected_token_exits_with_config_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    ingested: list[object] = []

    def reject(_config: IntuneConfig) -> None:
        raise AuthenticationError("Graph rejected the access token")

    monkeypatch.setattr(cli, "load_intune_config", lambda **_: make_config())
    monkeypatch.setattr(cli, "verify_graph_access", reject)
    monkeypatch.setattr(cli, "ingest_intune", lambda **kwargs: ingested.append(kwargs))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync", "--memory"])

    assert excinfo.value.code == 2
    assert not ingested


@pytest.mark.usefixtures("configured")
def test_sync_exits_non_zero_when_a_step_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    report = StepReport(StepId.CREATE_ACCOUNT)
    report.record(Fatal(error=RuntimeError("boom")))
    monkeypatch.setattr(
        cli,
        "ingest_intune",
        lambda **_: RunResult(reports={StepId.CREATE_ACCOUNT: report}),
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync", "--memory"])

    assert excinfo.value.code == 1


@pytest.mark.usefixtures("configured")
def test_sync_exports_graph(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fetcher = FakeIntuneFetcher(devices=[make_device(user_id=None)])

    def ingest_with_fake_fetcher(**kwargs: object) -> RunResult:
        return app.ingest_intune(fetcher=fetcher, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(cli, "ingest_intune", ingest_with_fake_fetcher)
    output = tmp_path / "graph.json"

    cli.main(["sync", "--memory", "--output", str(output)])

    payload = json.loads(output.read_text(encoding="utf-8"))
    entity_keys = {entity["_key"] for entity in payload["entities"]}
    assert {account_key(TENANT_ID), device_key(DESKTOP_ID)} <= entity_keys
    assert any(
        relationship.get("_mapping", {}).get("sourceEntityKey") == device_key(DESKTOP_ID)
        for relationship in payload["relationships"]
    )


def test_export_graph_counts_every_object(tmp_path: Path) -> None:
    store: GraphObjectStore = InMemoryGraphStore()
    result = app.ingest_intune(
        config=make_config(),
        fetcher=FakeIntuneFetcher(devices=[make_device(user_id=None)]),
        store=store,
    )
    output = tmp_path / "graph.json"

    count = app.export_graph(store, output)

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert result.succeeded
    assert count == len(payload["entities"]) + len(payload["relationships"])
    device = next(
        entity for entity in payload["entities"] if entity["_key"] == device_key(DESKTOP_ID)
    )
    assert device["_type"] == "user_endpoint"
    assert device["_rawData"][0]["rawData"]["id"] == DESKTOP_ID


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])

    assert excinfo.value.code == 0
    assert capsys.readouterr().out.strip().endswith(intune_graph.__version__)
