"""Tests for pipeline execution semantics."""

from __future__ import annotations

import gzip

import pytest

from httpreader import media_type
from httpreader.config import config
from httpreader.message import ResponseMessage
from httpreader.pipeline import ResponsePipeline
from httpreader.pipeline import Step
from httpreader.pipeline.executor import execute_pipeline


def recording_step(name, log, result=True):
    def run(context):
        log.append(name)
        return result

    return Step.predicate(name, run)


def test_steps_run_in_order(html_message):
    log: list[str] = []
    pipeline = ResponsePipeline()
    for name in ("first", "second", "third"):
        pipeline.add(recording_step(name, log))

    assert pipeline.execute(html_message) is True
    assert log == ["first", "second", "third"]


def test_builder_methods_chain():
    pipeline = ResponsePipeline()

    assert pipeline.use_status_code(print).use_reason_phrase(print) is pipeline
    assert [step.name for step in pipeline.steps] == [
        "use_status_code",
        "use_reason_phrase",
    ]


def test_halt_on_failure_skips_later_steps(html_message):
    seen: list[int] = []
    pipeline = (
        ResponsePipeline()
        .ensure_content_type(media_type.JSON)
        .use_status_code(seen.append)
    )

    assert pipeline.execute(html_message, halt_on_failure=True) is False
    assert seen == []
    assert len(pipeline) == 0


def test_continue_on_failure_runs_later_steps(html_message):
    seen: list[int] = []
    pipeline = (
        ResponsePipeline()
        .ensure_content_type(media_type.JSON)
        .use_status_code(seen.append)
    )

    assert pipeline.execute(html_message, halt_on_failure=False) is False
    assert seen == [200]


def test_result_is_and_of_all_steps(html_message):
    log: list[str] = []
    pipeline = ResponsePipeline()
    pipeline.add(recording_step("fail", log, result=False))
    pipeline.add(recording_step("pass", log, result=True))

    assert pipeline.execute(html_message, halt_on_failure=False) is False
    assert log == ["fail", "pass"]


def test_halt_default_comes_from_config(html_message, monkeypatch):
    monkeypatch.setattr(config, "halt_on_failure", False)
    seen: list[int] = []
    pipeline = (
        ResponsePipeline()
        .ensure_content_type(media_type.JSON)
        .use_status_code(seen.append)
    )

    assert pipeline.execute(html_message) is False
    assert seen == [200]


def test_pipeline_is_single_use(html_message):
    seen: list[int] = []
    pipeline = ResponsePipeline().use_status_code(seen.append)

    assert pipeline.execute(html_message) is True
    assert pipeline.execute(html_message) is True
    assert seen == [200]
    assert pipeline.steps == ()


def test_empty_pipeline_succeeds(html_message):
    assert ResponsePipeline().execute(html_message) is True


def test_accumulator_is_threaded_to_callbacks(json_message):
    record: dict = {}
    pipeline = (
        ResponsePipeline(accumulate=True)
        .use_status_code(lambda code, acc: acc.__setitem__("status", code))
        .use_reason_phrase(lambda reason, acc: acc.__setitem__("reason", reason))
        .ensure_json_content(lambda value, acc: acc.__setitem__("body", value))
    )

    assert pipeline.execute(json_message, accumulator=record) is True
    assert record == {"status": 201, "reason": "Created", "body": {"a": 1, "b": [1, 2]}}


def test_gzip_json_end_to_end():
    message = ResponseMessage.make(
        content=gzip.compress(b'{"a":1}'),
        headers={"Content-Type": "application/json", "Content-Encoding": "gzip"},
    )
    record: dict = {}
    pipeline = (
        ResponsePipeline(accumulate=True)
        .use_gzip_decompression()
        .ensure_json_content(lambda value, acc: acc.update(value))
    )

    assert pipeline.execute(message, accumulator=record, halt_on_failure=True) is True
    assert record == {"a": 1}


def test_caller_exceptions_propagate(html_message):
    seen: list[int] = []

    def boom(code):
        raise RuntimeError("caller bug")

    pipeline = ResponsePipeline().use_status_code(boom).use_status_code(seen.append)

    with pytest.raises(RuntimeError):
        pipeline.execute(html_message)

    assert len(pipeline) == 0
    assert pipeline.execute(html_message) is True
    assert seen == []


def test_from_operations_builds_declared_steps():
    message = ResponseMessage.make(
        status_code=200,
        content=gzip.compress(b"{}"),
        headers={
            "Content-Type": "application/json; charset=utf-8",
            "Content-Encoding": "gzip",
            "X-Request-Id": "abc",
        },
    )
    pipeline = ResponsePipeline.from_operations(
        [
            {"op": "decompress", "encoding": "gzip"},
            {"op": "ensure_content_type", "media_type": "application/json"},
            {"op": "ensure_header", "name": "x-request-id"},
            {"op": "ensure_header", "name": "x-request-id", "value": "abc"},
            {"op": "ensure_status_code", "codes": [200, 204]},
        ]
    )

    assert len(pipeline) == 5
    assert pipeline.execute(message) is True
    assert message.content.read() == b"{}"


def test_from_operations_skips_unknown_ops(caplog):
    pipeline = ResponsePipeline.from_operations(
        [{"encoding": "gzip"}, {"op": "transmogrify"}, {"op": "decompress", "encoding": "br"}]
    )

    assert [step.name for step in pipeline.steps] == ["decompress:br"]
    assert "Unknown pipeline operation: transmogrify" in caplog.text


@pytest.mark.parametrize(
    "operation",
    [
        {"op": "decompress"},
        {"op": "decompress", "encoding": "lzma"},
        {"op": "ensure_content_type"},
        {"op": "ensure_content_type", "media_type": "bogus"},
        {"op": "ensure_header"},
        {"op": "ensure_status_code"},
    ],
)
def test_from_operations_rejects_incomplete_ops(operation):
    with pytest.raises(ValueError):
        ResponsePipeline.from_operations([operation])


def test_execute_pipeline_helper(html_message):
    assert execute_pipeline(html_message, [{"op": "ensure_content_type", "media_type": "text/html"}])
    assert not execute_pipeline(
        html_message,
        [{"op": "ensure_header", "name": "server", "value": "other"}],
    )
