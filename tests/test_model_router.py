"""
Unit tests for providers/model_router.py
"""

from unittest.mock import MagicMock

import pytest

from errors import AllModelsFailedError
from providers.model_router import (
    ModelFallbackRouter,
    RouterState,
    is_chat_capable_model,
    normalize_model_name,
)


def _model(name, methods=("generateContent",), display_name=""):
    return {
        "name": f"models/{name}",
        "displayName": display_name,
        "supportedGenerationMethods": list(methods),
    }


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def _loaded_router(candidates, next_index=0, fetch=None):
    state = RouterState(candidates=list(candidates), expires_at=100.0, next_index=next_index)
    return ModelFallbackRouter(
        fetch or MagicMock(), ttl_seconds=300, state=state, clock=FakeClock(0.0)
    )


class TestModelFilter:
    def test_normalize_name(self):
        assert normalize_model_name("models/gemini-2.0-flash") == "gemini-2.0-flash"
        assert normalize_model_name("gemini-2.0-flash") == "gemini-2.0-flash"
        assert normalize_model_name(None) == ""

    def test_keeps_flash_models(self):
        assert is_chat_capable_model(_model("gemini-2.0-flash"))

    def test_drops_embedding_models(self):
        assert not is_chat_capable_model(_model("gemini-embedding-001"))

    def test_drops_pro_models(self):
        assert not is_chat_capable_model(_model("gemini-1.5-pro"))
        assert not is_chat_capable_model(_model("gemini-x", display_name="Gemini Pro"))

    def test_drops_non_gemini(self):
        assert not is_chat_capable_model(_model("text-bison-001"))

    def test_requires_generate_content(self):
        assert not is_chat_capable_model(_model("gemini-2.0-flash", methods=("countTokens",)))


class TestRoundRobin:
    """Cursor movement and fallback order."""

    def test_skips_failing_model_and_wraps_cursor(self):
        router = _loaded_router(["A", "B", "C"], next_index=1)
        calls = []

        def request(model):
            calls.append(model)
            if model == "B":
                raise RuntimeError("quota exceeded")
            return f"reply from {model}"

        result = router.run(request)

        assert result == "reply from C"
        assert calls == ["B", "C"]
        assert router.state.next_index == 0
        router.fetch_models.assert_not_called()

    def test_success_advances_cursor(self):
        router = _loaded_router(["A", "B", "C"])

        router.run(lambda model: model)
        assert router.state.next_index == 1
        assert router.run(lambda model: model) == "B"
        assert router.state.next_index == 2

    def test_all_fail(self):
        router = _loaded_router(["A", "B", "C"], next_index=2)

        def request(model):
            raise RuntimeError(f"{model} down")

        with pytest.raises(AllModelsFailedError) as exc_info:
            router.run(request)

        assert exc_info.value.attempted == ["C", "A", "B"]
        assert exc_info.value.last_error == "B down"
        assert router.state.next_index == 2

    def test_on_error_callback(self):
        router = _loaded_router(["A", "B"])
        on_error = MagicMock()

        def request(model):
            if model == "A":
                raise RuntimeError("nope")
            return "ok"

        router.run(request, on_error=on_error)

        on_error.assert_called_once()
        assert on_error.call_args[0][0] == "A"

    def test_shared_state_between_routers(self):
        state = RouterState(candidates=["A", "B"], expires_at=100.0)
        first = ModelFallbackRouter(MagicMock(), state=state, clock=FakeClock())
        second = ModelFallbackRouter(MagicMock(), state=state, clock=FakeClock())

        first.run(lambda model: model)

        assert second.run(lambda model: model) == "B"


class TestCandidateCache:
    """TTL-bound candidate list."""

    def test_fetches_and_filters(self):
        fetch = MagicMock(
            return_value=[
                _model("gemini-2.0-flash"),
                _model("gemini-embedding-001"),
                _model("gemini-1.5-pro"),
                _model("gemini-2.0-flash-lite"),
            ]
        )
        router = ModelFallbackRouter(fetch, clock=FakeClock())

        assert router.get_candidates() == ["gemini-2.0-flash", "gemini-2.0-flash-lite"]

    def test_cached_within_ttl(self):
        clock = FakeClock(0.0)
        fetch = MagicMock(return_value=[_model("gemini-2.0-flash")])
        router = ModelFallbackRouter(fetch, ttl_seconds=300, clock=clock)

        router.get_candidates()
        clock.now = 299.0
        router.get_candidates()

        assert fetch.call_count == 1

    def test_refetched_after_ttl(self):
        clock = FakeClock(0.0)
        fetch = MagicMock(return_value=[_model("gemini-2.0-flash")])
        router = ModelFallbackRouter(fetch, ttl_seconds=300, clock=clock)

        router.get_candidates()
        clock.now = 301.0
        router.get_candidates()

        assert fetch.call_count == 2

    def test_force_refresh(self):
        fetch = MagicMock(return_value=[_model("gemini-2.0-flash")])
        router = ModelFallbackRouter(fetch, clock=FakeClock())

        router.get_candidates()
        router.get_candidates(force_refresh=True)

        assert fetch.call_count == 2

    def test_cursor_reset_when_list_shrinks(self):
        state = RouterState(next_index=5)
        fetch = MagicMock(return_value=[_model("gemini-a"), _model("gemini-b")])
        router = ModelFallbackRouter(fetch, state=state, clock=FakeClock())

        router.get_candidates()

        assert state.next_index == 0

    def test_no_eligible_models(self):
        fetch = MagicMock(return_value=[_model("gemini-embedding-001")])
        router = ModelFallbackRouter(fetch, clock=FakeClock())

        with pytest.raises(AllModelsFailedError) as exc_info:
            router.run(lambda model: model)

        assert exc_info.value.attempted == []

    def test_invalidate(self):
        fetch = MagicMock(return_value=[_model("gemini-a")])
        router = ModelFallbackRouter(fetch, clock=FakeClock())

        router.get_candidates()
        router.invalidate()

        assert not router.is_loaded
        router.get_candidates()
        assert fetch.call_count == 2
