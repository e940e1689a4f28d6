from __future__ import annotations

import argparse
import logging
from pathlib import Path

from apps.evaluator_cli.client import EvaluatorApiClient
from apps.evaluator_cli.logging_utils import configure_logging
from packages.contracts.models import EvaluateRequest
from packages.evaluation import (
    DEBUG_VARIABLE_NAME,
    EvaluationError,
    PolicyEvaluator,
    SubprocessRunner,
    evaluate_policy,
)

logger = logging.getLogger("policy_evaluator.cli")


class _ConsoleSink:
    def log(self, message: str) -> None:
        print(message)


def _variables(args: argparse.Namespace) -> dict[str, str]:
    return {DEBUG_VARIABLE_NAME: "true"} if args.debug else {}


def _report(violations: list[str]) -> int:
    if not violations:
        print("No policy violations found.")
        return 0
    print(f"{len(violations)} policy violation(s):")
    for violation in violations:
        print(violation)
    return 1


def _cmd_evaluate(args: argparse.Namespace) -> int:
    evaluator = PolicyEvaluator(
        runner=SubprocessRunner(),
        work_dir=args.work_dir,
        opa_path=args.opa_path,
        timeout_seconds=args.timeout,
    )
    try:
        outcome = evaluate_policy(
            Path(args.policy).read_text(encoding="utf-8"),
            Path(args.provenance).read_text(encoding="utf-8"),
            _variables(args),
            evaluator=evaluator,
            sinks=[_ConsoleSink()],
        )
    except EvaluationError as exc:
        raise SystemExit(f"evaluation failed: {exc}") from exc
    return _report(outcome.violations)


def _cmd_submit(args: argparse.Namespace) -> int:
    client = EvaluatorApiClient(args.api_url, timeout_seconds=args.timeout)
    req = EvaluateRequest(
        policy=Path(args.policy).read_text(encoding="utf-8"),
        image_provenance=Path(args.provenance).read_text(encoding="utf-8"),
        variables=_variables(args),
    )
    resp = client.evaluate(req)
    if resp.log:
        print(resp.log)
    logger.info("invocation_id=%s status=%s", resp.invocation_id, resp.status)
    return _report(resp.violations)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Artifact policy evaluator CLI")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    evaluate = sub.add_parser("evaluate", help="evaluate a policy locally with the opa binary")
    evaluate.add_argument("--policy", required=True)
    evaluate.add_argument("--provenance", required=True)
    evaluate.add_argument("--debug", action="store_true")
    evaluate.add_argument("--opa-path", default="opa")
    evaluate.add_argument("--work-dir", default=".")
    evaluate.add_argument("--timeout", type=float, default=60.0)
    evaluate.set_defaults(func=_cmd_evaluate)

    submit = sub.add_parser("submit", help="send a policy to a running evaluator API")
    submit.add_argument("--api-url", default="http://localhost:8002")
    submit.add_argument("--policy", required=True)
    submit.add_argument("--provenance", required=True)
    submit.add_argument("--debug", action="store_true")
    submit.add_argument("--timeout", type=float, default=120.0)
    submit.set_defaults(func=_cmd_submit)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
