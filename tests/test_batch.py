"""
Tests for src/model_orchestrator/batch.py: ordering, failure isolation,
conversion of unexpected exceptions, and the optional concurrency cap.
"""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from src.model_orchestrator.errors import ErrorCategory, ProviderTransportError
from src.model_orchestrator.executor import ModelOrchestrator
from src.model_orchestrator.models import ProviderId, TaskCategory, TaskRequest, TaskResult


def _requests(n: int, category=TaskCategory.FACTUAL_QUESTIONS) -> list[TaskRequest]:
    return [TaskRequest(category, f"prompt {i}") for i in range(n)]


class TestExecuteBatchOrdering:

    @pytest.mark.asyncio
    async def test_results_follow_input_order(
        self, scenario_registry, make_orchestrator, fake_transport,
    ):
        # Earlier requests sleep longer, so they finish last
        async def slow_echo(request: TaskRequest) -> str:
            index = int(request.prompt.split()[-1])
            await asyncio.sleep(0.01 * (5 - index))
            return f"echo {request.prompt}"

        orchestrator, _ = make_orchestrator(
            scenario_registry, {ProviderId.CLAUDE: fake_transport(slow_echo)},
        )

        results = await orchestrator.execute_batch(_requests(5))

        assert [r.data for r in results] == [f"echo prompt {i}" for i in range(5)]
        assert all(r.success for r in results)

    @pytest.mark.asyncio
    async def test_empty_batch(self, scenario_registry, make_orchestrator):
        orchestrator, _ = make_orchestrator(scenario_registry)
        assert await orchestrator.execute_batch([]) == []


class TestExecuteBatchFailureIsolation:

    @pytest.mark.asyncio
    async def test_raw_exception_in_one_request_falls_back(
        self, scenario_registry, make_orchestrator, fake_transport,
    ):
        # Request #2's transport raises a raw network exception, not a
        # structured ProviderTransportError; openai is available to serve it
        def flaky(request: TaskRequest) -> str:
            if request.prompt == "prompt 1":
                raise ConnectionResetError("connection reset by peer")
            return f"ok {request.prompt}"

        orchestrator, transports = make_orchestrator(
            scenario_registry, {ProviderId.CLAUDE: fake_transport(flaky)},
        )

        results = await orchestrator.execute_batch(_requests(3))

        assert [r.success for r in results] == [True, True, True]
        assert results[0].data == "ok prompt 0"
        assert results[1].provider == ProviderId.OPENAI
        assert results[1].data == "reply from openai"
        assert results[1].attempts == 2
        assert results[2].data == "ok prompt 2"
        assert transports[ProviderId.OPENAI].call_count == 1


class TestExecuteBatchUnexpectedErrors:
    """Exceptions raised by ``execute`` itself become placeholder results."""

    @pytest.mark.asyncio
    async def test_raising_execute_isolated(self, scenario_registry, make_orchestrator):
        orchestrator, _ = make_orchestrator(scenario_registry)

        async def execute(request: TaskRequest) -> TaskResult:
            if request.prompt == "prompt 1":
                raise RuntimeError("executor bug")
            return TaskResult(success=True, provider=ProviderId.CLAUDE, elapsed_ms=1, data="ok")

        with patch.object(ModelOrchestrator, "execute", side_effect=execute):
            results = await orchestrator.execute_batch(_requests(3))

        assert len(results) == 3
        assert results[0].success is True
        assert results[1].success is False
        assert results[1].provider is None
        assert results[1].error == "executor bug"
        assert results[1].error_category == ErrorCategory.UNEXPECTED
        assert results[1].attempts == 0
        assert results[2].success is True

    @pytest.mark.asyncio
    async def test_exception_without_message_uses_type_name(
        self, scenario_registry, make_orchestrator,
    ):
        orchestrator, _ = make_orchestrator(scenario_registry)
        with patch.object(ModelOrchestrator, "execute", side_effect=TimeoutError()):
            results = await orchestrator.execute_batch(_requests(1))
        assert results[0].success is False
        assert results[0].error == "TimeoutError"

    @pytest.mark.asyncio
    async def test_elapsed_time_recorded(self, scenario_registry, make_orchestrator):
        orchestrator, _ = make_orchestrator(scenario_registry)

        async def execute(request: TaskRequest) -> TaskResult:
            await asyncio.sleep(0.05)
            raise RuntimeError("late failure")

        with patch.object(ModelOrchestrator, "execute", side_effect=execute):
            results = await orchestrator.execute_batch(_requests(2))

        assert all(r.success is False for r in results)
        assert all(r.elapsed_ms >= 40 for r in results)

    @pytest.mark.asyncio
    async def test_mixed_outcomes_keep_length_and_order(
        self, all_available_registry, make_orchestrator, fake_transport,
    ):
        # creative → grok (cheapest); current affairs → grok; content → claude
        def grok_reply(request: TaskRequest) -> str:
            if request.task_category is TaskCategory.CURRENT_AFFAIRS:
                raise ProviderTransportError("grok", "Grok API error: 500", 500)
            return "grok text"

        orchestrator, _ = make_orchestrator(
            all_available_registry,
            {
                ProviderId.GROK: fake_transport(grok_reply),
                ProviderId.OPENAI: fake_transport(
                    ProviderTransportError("openai", "OpenAI API error: 500", 500)
                ),
            },
        )
        requests = [
            TaskRequest(TaskCategory.CREATIVE_QUESTIONS, "a"),
            TaskRequest(TaskCategory.CURRENT_AFFAIRS, "b"),
            TaskRequest(TaskCategory.CONTENT_ANALYSIS, "c"),
        ]

        results = await orchestrator.execute_batch(requests)

        assert [r.success for r in results] == [True, False, True]
        assert results[0].provider == ProviderId.GROK
        # grok failed; exclude-failed rotation at t=0 → openai, which also fails
        assert results[1].provider == ProviderId.OPENAI
        assert results[1].error == "OpenAI API error: 500"
        assert results[2].provider == ProviderId.CLAUDE


class TestExecuteBatchConcurrency:

    @staticmethod
    def _tracking_transport(fake_transport, state: dict):
        async def reply(request: TaskRequest) -> str:
            state["in_flight"] += 1
            state["peak"] = max(state["peak"], state["in_flight"])
            await asyncio.sleep(0.01)
            state["in_flight"] -= 1
            return "done"

        return fake_transport(reply)

    @pytest.mark.asyncio
    async def test_unbounded_runs_concurrently(
        self, scenario_registry, make_orchestrator, fake_transport,
    ):
        state = {"in_flight": 0, "peak": 0}
        orchestrator, _ = make_orchestrator(
            scenario_registry,
            {ProviderId.CLAUDE: self._tracking_transport(fake_transport, state)},
        )
        await orchestrator.execute_batch(_requests(6))
        assert state["peak"] == 6

    @pytest.mark.asyncio
    async def test_max_concurrency_caps_in_flight(
        self, scenario_registry, make_orchestrator, fake_transport,
    ):
        state = {"in_flight": 0, "peak": 0}
        orchestrator, _ = make_orchestrator(
            scenario_registry,
            {ProviderId.CLAUDE: self._tracking_transport(fake_transport, state)},
        )
        results = await orchestrator.execute_batch(_requests(6), max_concurrency=2)
        assert state["peak"] == 2
        assert len(results) == 6

    @pytest.mark.asyncio
    async def test_invalid_max_concurrency(self, scenario_registry, make_orchestrator):
        orchestrator, _ = make_orchestrator(scenario_registry)
        with pytest.raises(ValueError):
            await orchestrator.execute_batch(_requests(1), max_concurrency=0)
