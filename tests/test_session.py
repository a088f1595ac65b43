"""Tests for StreamSession - the per-turn lifecycle controller."""

import asyncio

import pytest

from codestream.agent.sse import StreamEvent
from codestream.agent.streaming import ArtifactExtractor, SessionState, StreamSession
from codestream.core.modes import InteractionMode, RequestContext, encode_request
from codestream.errors import TransportError


def make_session(history, store, text="question", on_update=None):
    extractor = ArtifactExtractor(store)
    return StreamSession(history, extractor, text, on_update=on_update)


def request():
    return encode_request(InteractionMode.CODE, RequestContext(user_input="question"))


class TestEventDrivenLifecycle:
    def test_states(self, history, store):
        session = make_session(history, store)
        assert session.state is SessionState.IDLE

        session.begin()
        assert session.state is SessionState.SENDING
        assert [m.role for m in history] == ["user"]

        session.on_chunk("Hello")
        assert session.state is SessionState.STREAMING
        assert session.streaming_narration == "Hello"

        message = session.finish()
        assert session.state is SessionState.FINALIZED
        assert message.content == "Hello"
        assert session.streaming_narration == ""
        assert [m.role for m in history] == ["user", "assistant"]

    def test_begin_twice_raises(self, history, store):
        session = make_session(history, store)
        session.begin()
        with pytest.raises(RuntimeError):
            session.begin()

    def test_streaming_narration_is_not_history(self, history, store):
        session = make_session(history, store)
        session.begin()
        session.on_chunk("partial [CODE_START:py]x = ")
        assert session.streaming_narration == "partial [Code: py]"
        assert len(history) == 1

    def test_duplicate_finish_is_noop(self, history, store):
        session = make_session(history, store)
        session.begin()
        session.on_chunk("a [CODE_START:py]x[CODE_END]")
        first = session.finish()
        second = session.finish()
        session.fail(TransportError("late"))
        session.on_chunk("late chunk")
        assert first is second
        assert len(history) == 2
        assert store.artifacts[0].content == "x"

    def test_on_update_receives_live_text(self, history, store):
        updates = []
        session = make_session(history, store, on_update=updates.append)
        session.begin()
        for chunk in ["Hi ", "[CODE_START:", "js]a", "b[CODE_END] bye"]:
            session.on_chunk(chunk)
        assert updates == ["Hi ", "Hi ", "Hi [Code: js]", "Hi [Code: js] bye"]

    def test_failing_update_callback_is_contained(self, history, store):
        def boom(text):
            raise ValueError("render failed")

        session = make_session(history, store, on_update=boom)
        session.begin()
        session.on_chunk("still works")
        assert session.finish().content == "still works"

    def test_chunk_error_is_skipped(self, history, store):
        session = make_session(history, store)
        session.begin()
        session.on_chunk("one ")
        session.on_chunk_error("Malformed event payload")
        session.on_chunk("two")
        assert session.finish().content == "one two"

    def test_fail_preserves_partial_output(self, history, store):
        session = make_session(history, store)
        session.begin()
        session.on_chunk("partial answer")
        message = session.fail(TransportError("connection dropped"))
        assert message.content == "partial answer"

    def test_fail_without_output_adds_failure_message(self, history, store):
        session = make_session(history, store)
        session.begin()
        message = session.fail(TransportError("connection dropped"))
        assert message.role == "assistant"
        assert message.content == "An error occurred: connection dropped"

    def test_abandon_adds_nothing(self, history, store):
        session = make_session(history, store)
        session.begin()
        session.on_chunk("half")
        session.abandon()
        session.finish()
        assert session.state is SessionState.ABANDONED
        assert session.message is None
        assert [m.role for m in history] == ["user"]


class TestRun:
    @pytest.mark.asyncio
    async def test_complete_stream(self, history, store, fake_transport):
        transport = fake_transport(
            ["intro [CODE_START:py]print", "(1)[CODE_END] outro", StreamEvent.done()]
        )
        session = make_session(history, store)
        message = await session.run(transport, request())

        assert message.content == "intro [Code: py] outro"
        assert store.artifacts[0].content == "print(1)"
        assert store.artifacts[0].collecting is False
        assert session.state is SessionState.FINALIZED

    @pytest.mark.asyncio
    async def test_events_after_done_are_ignored(self, history, store, fake_transport):
        transport = fake_transport(["a", StreamEvent.done(), "b", StreamEvent.done()])
        session = make_session(history, store)
        message = await session.run(transport, request())
        assert message.content == "a"
        assert len(history) == 2

    @pytest.mark.asyncio
    async def test_close_without_done_finalizes(self, history, store, fake_transport):
        transport = fake_transport(["hello [CODE_START:js]const x=1;"])
        session = make_session(history, store)
        message = await session.run(transport, request())
        assert message.content == "hello [Code: js]"
        assert store.artifacts[0].collecting is True

    @pytest.mark.asyncio
    async def test_malformed_chunk_skipped(self, history, store, fake_transport):
        transport = fake_transport(
            ["a", StreamEvent.error("Malformed event payload"), "b", StreamEvent.done()]
        )
        message = await make_session(history, store).run(transport, request())
        assert message.content == "ab"

    @pytest.mark.asyncio
    async def test_transport_failure_keeps_partial(self, history, store, fake_transport):
        transport = fake_transport(["partial"], error=TransportError("dropped"))
        message = await make_session(history, store).run(transport, request())
        assert message.content == "partial"

    @pytest.mark.asyncio
    async def test_transport_failure_before_output(self, history, store, fake_transport):
        transport = fake_transport(
            error=TransportError("Server responded with status 500: oops", 500)
        )
        message = await make_session(history, store).run(transport, request())
        assert message.content == "An error occurred: Server responded with status 500: oops"
        assert [m.role for m in history] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_unexpected_transport_exception(self, history, store, fake_transport):
        transport = fake_transport(["x"], error=OSError("socket closed"))
        message = await make_session(history, store).run(transport, request())
        assert message.content == "x"

    @pytest.mark.asyncio
    async def test_cancel_abandons(self, history, store):
        started = asyncio.Event()

        class StallingTransport:
            async def stream(self, request):
                yield StreamEvent.chunk("first")
                started.set()
                await asyncio.sleep(60)
                yield StreamEvent.done()

        session = make_session(history, store)
        task = asyncio.create_task(session.run(StallingTransport(), request()))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert session.state is SessionState.ABANDONED
        assert [m.role for m in history] == ["user"]
