from __future__ import annotations

import json
import logging
import uuid

import pytest

from packages.evaluation import (
    MISSING_PACKAGE_MESSAGE,
    UNDEFINED_RULE_MESSAGE,
    DebugGateLogger,
    EvaluationInput,
    EvaluatorTimeoutError,
    LogBuffer,
    PolicyEvaluator,
    evaluate_policy,
)
from tests.fixtures.sample_data import SAMPLE_OUTPUT, SAMPLE_POLICY, SAMPLE_PROVENANCE, FakeRunner


def _evaluate(tmp_path, runner: FakeRunner, policy: str = SAMPLE_POLICY, debug: bool = False, buffer=None):
    evaluator = PolicyEvaluator(runner=runner, work_dir=tmp_path, opa_path="opa")
    request = EvaluationInput(policy_text=policy, provenance_document=SAMPLE_PROVENANCE, debug_enabled=debug)
    gate = DebugGateLogger(logging.getLogger("test.orchestrator"), sinks=[buffer or LogBuffer()], debug_enabled=debug)
    return request, evaluator.evaluate(request, gate)


def test_violations_are_returned_and_workspace_removed(tmp_path) -> None:
    runner = FakeRunner(output=SAMPLE_OUTPUT)
    request, outcome = _evaluate(tmp_path, runner)

    assert outcome.exit_code == 0
    assert outcome.violations == ['"missing signature"']
    assert outcome.raw_output == SAMPLE_OUTPUT
    assert outcome.diagnostic_log == SAMPLE_OUTPUT.replace("\n", "\r\n")
    assert runner.cwds == [tmp_path / f"Policy-{request.invocation_id.hex}"]
    assert list(tmp_path.iterdir()) == []


def test_runner_sees_staged_inputs_and_deterministic_arguments(tmp_path) -> None:
    runner = FakeRunner()
    _evaluate(tmp_path, runner)

    root = runner.cwds[0]
    assert runner.calls[0] == [
        "opa",
        "eval",
        "-f",
        "pretty",
        "--explain",
        "notes",
        "-i",
        str(root / "ImageProvenance.json"),
        "-d",
        str(root / "Policies.rego"),
        "data.images.provenance.violations",
    ]
    assert runner.staged[0] == {"ImageProvenance.json": SAMPLE_PROVENANCE, "Policies.rego": SAMPLE_POLICY}


def test_debug_requests_full_explanation(tmp_path) -> None:
    runner = FakeRunner()
    buffer = LogBuffer()
    _evaluate(tmp_path, runner, debug=True, buffer=buffer)
    assert runner.calls[0][5] == "full"
    pretty = json.dumps(json.loads(SAMPLE_PROVENANCE), indent=2)
    assert f"Image provenance : \r\n{pretty}" in buffer.lines


def test_missing_package_short_circuits_without_workspace(tmp_path) -> None:
    runner = FakeRunner()
    _, outcome = _evaluate(tmp_path, runner, policy='violations["x"] { true }')

    assert outcome.violations == [MISSING_PACKAGE_MESSAGE]
    assert outcome.diagnostic_log == MISSING_PACKAGE_MESSAGE
    assert outcome.exit_code is None
    assert runner.calls == []
    assert list(tmp_path.iterdir()) == []


def test_missing_package_message_reaches_task_log_without_debug(tmp_path) -> None:
    buffer = LogBuffer()
    _evaluate(tmp_path, FakeRunner(), policy="no declaration here", buffer=buffer)
    assert buffer.lines == [MISSING_PACKAGE_MESSAGE]


def test_nonzero_exit_reports_issue_with_raw_output(tmp_path) -> None:
    output = "1 error occurred: Policies.rego:2: rego_parse_error\n"
    runner = FakeRunner(output=output, exit_code=1)
    _, outcome = _evaluate(tmp_path, runner)

    assert outcome.exit_code == 1
    assert outcome.violations == [f"Policy run had issues: {output}"]
    assert outcome.diagnostic_log == output
    assert list(tmp_path.iterdir()) == []


def test_undefined_rule_reports_synthetic_message(tmp_path) -> None:
    _, outcome = _evaluate(tmp_path, FakeRunner(output="undefined\n"))
    assert outcome.violations == [UNDEFINED_RULE_MESSAGE]
    assert list(tmp_path.iterdir()) == []


def test_timeout_propagates_after_teardown(tmp_path) -> None:
    runner = FakeRunner(error=EvaluatorTimeoutError(5, "partial"))
    with pytest.raises(EvaluatorTimeoutError):
        _evaluate(tmp_path, runner)
    assert list(tmp_path.iterdir()) == []


def test_classifier_failure_still_tears_down(tmp_path) -> None:
    def exploding_classifier(raw_output: str):
        raise RuntimeError("classifier bug")

    evaluator = PolicyEvaluator(runner=FakeRunner(), work_dir=tmp_path, classifier=exploding_classifier)
    request = EvaluationInput(policy_text=SAMPLE_POLICY, provenance_document=SAMPLE_PROVENANCE)
    with pytest.raises(RuntimeError):
        evaluator.evaluate(request, DebugGateLogger(logging.getLogger("test.orchestrator")))
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("policy", ["package images.provenance.\nviolations[x] { x := 1 }", "package evil..name\n"])
def test_unparseable_package_short_circuits_without_workspace(tmp_path, monkeypatch, policy: str) -> None:
    def no_staging(*args, **kwargs):
        raise AssertionError("workspace must not be staged")

    monkeypatch.setattr("packages.evaluation.orchestrator.staged_workspace", no_staging)
    runner = FakeRunner()
    buffer = LogBuffer()
    _, outcome = _evaluate(tmp_path, runner, policy=policy, buffer=buffer)

    assert outcome.violations == [MISSING_PACKAGE_MESSAGE]
    assert outcome.diagnostic_log == MISSING_PACKAGE_MESSAGE
    assert buffer.lines == [MISSING_PACKAGE_MESSAGE]
    assert runner.calls == []
    assert list(tmp_path.iterdir()) == []


def test_repeated_runs_are_isolated_and_identical(tmp_path) -> None:
    runner = FakeRunner()
    evaluator = PolicyEvaluator(runner=runner, work_dir=tmp_path)
    outcomes = [
        evaluate_policy(SAMPLE_POLICY, SAMPLE_PROVENANCE, {}, evaluator=evaluator, invocation_id=uuid.uuid4())
        for _ in range(3)
    ]
    assert len(set(runner.cwds)) == 3
    assert all(o.violations == outcomes[0].violations for o in outcomes)
    assert list(tmp_path.iterdir()) == []
