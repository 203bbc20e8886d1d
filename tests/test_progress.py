"""Tests for the progress channel and its consumer."""

import asyncio
from pathlib import Path

import pytest

from fsgitwatch import (
    ChannelClosedError,
    ConsoleOutputHandler,
    DirectoryVisited,
    NullOutputHandler,
    ProgressChannel,
    ProgressTracker,
    RemoteReference,
    RepositoryFound,
    RepositoryMatch,
    RepositoryMatched,
    RepositoryRejected,
    ScanCancelled,
    ScanFinished,
    ScanWarning,
    SearchPattern,
    Verbosity,
)

PATTERN = SearchPattern("x", "y")


def _match(path: str) -> RepositoryMatch:
    return RepositoryMatch(Path(path), (RemoteReference("origin", "git@github.com:x/y.git"),))


class TestProgressChannel:
    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            ProgressChannel(0)

    @pytest.mark.asyncio
    async def test_events_delivered_in_order_then_finished(self):
        channel = ProgressChannel(8)
        await channel.send(DirectoryVisited(Path("/a")))
        await channel.send(RepositoryFound(Path("/a")))
        channel.close()

        assert await channel.receive() == DirectoryVisited(Path("/a"))
        assert await channel.receive() == RepositoryFound(Path("/a"))
        assert isinstance(await channel.receive(), ScanFinished)
        # terminal signal is sticky
        assert isinstance(await channel.receive(), ScanFinished)

    @pytest.mark.asyncio
    async def test_send_after_close_raises(self):
        channel = ProgressChannel(2)
        channel.close()
        with pytest.raises(ChannelClosedError):
            await channel.send(DirectoryVisited(Path("/a")))

    @pytest.mark.asyncio
    async def test_backpressure_suspends_sender(self):
        channel = ProgressChannel(2)
        await channel.send(DirectoryVisited(Path("/1")))
        await channel.send(DirectoryVisited(Path("/2")))

        blocked = asyncio.create_task(channel.send(DirectoryVisited(Path("/3"))))
        await asyncio.sleep(0.01)
        assert not blocked.done()
        assert channel.pending() == 2

        assert await channel.receive() == DirectoryVisited(Path("/1"))
        await asyncio.wait_for(blocked, timeout=1)
        assert channel.pending() == 2

    @pytest.mark.asyncio
    async def test_close_on_full_channel_does_not_block_or_drop(self):
        channel = ProgressChannel(1)
        await channel.send(DirectoryVisited(Path("/a")))
        channel.close()

        assert await channel.receive() == DirectoryVisited(Path("/a"))
        assert isinstance(await channel.receive(), ScanFinished)

    @pytest.mark.asyncio
    async def test_cancel_is_distinct_from_close(self):
        channel = ProgressChannel(4)
        await channel.send(DirectoryVisited(Path("/a")))
        channel.cancel()
        channel.close()  # no effect after termination

        assert channel.was_cancelled
        assert await channel.receive() == DirectoryVisited(Path("/a"))
        assert isinstance(await channel.receive(), ScanCancelled)

    @pytest.mark.asyncio
    async def test_cancel_wakes_waiting_consumer(self):
        channel = ProgressChannel(4)
        waiter = asyncio.create_task(channel.receive())
        await asyncio.sleep(0)
        channel.cancel()
        assert isinstance(await asyncio.wait_for(waiter, timeout=1), ScanCancelled)

    @pytest.mark.asyncio
    async def test_async_iteration_stops_at_terminal(self):
        channel = ProgressChannel(4)
        await channel.send(DirectoryVisited(Path("/a")))
        await channel.send(DirectoryVisited(Path("/b")))
        channel.close()

        received = [event async for event in channel]
        assert received == [DirectoryVisited(Path("/a")), DirectoryVisited(Path("/b"))]


class TestProgressTracker:
    async def _run(self, events, terminal="close", **kwargs):
        channel = ProgressChannel(len(events) + 1)
        for event in events:
            await channel.send(event)
        if terminal == "close":
            channel.close()
        else:
            channel.cancel()
        kwargs.setdefault("output", NullOutputHandler())
        kwargs.setdefault("show_progress", False)
        return await ProgressTracker(channel, PATTERN, **kwargs).run()

    @pytest.mark.asyncio
    async def test_accumulates_outcome(self):
        events = [
            DirectoryVisited(Path("/root")),
            DirectoryVisited(Path("/root/a")),
            RepositoryFound(Path("/root/a")),
            RepositoryMatched(_match("/root/a")),
            DirectoryVisited(Path("/root/b")),
            RepositoryFound(Path("/root/b")),
            RepositoryRejected(Path("/root/b")),
            ScanWarning(Path("/root/c"), "Permission denied"),
        ]
        outcome = await self._run(events)

        assert outcome.pattern == PATTERN
        assert outcome.matched_paths == {Path("/root/a")}
        assert outcome.directories_visited == 3
        assert outcome.repositories_found == 2
        assert outcome.repositories_rejected == 1
        assert [w.path for w in outcome.warnings] == [Path("/root/c")]
        assert outcome.cancelled is False

    @pytest.mark.asyncio
    async def test_matches_kept_in_arrival_order(self):
        events = [RepositoryMatched(_match(p)) for p in ("/c", "/a", "/b")]
        outcome = await self._run(events)
        assert [str(m.path) for m in outcome.matches] == ["/c", "/a", "/b"]

    @pytest.mark.asyncio
    async def test_cancelled_outcome(self):
        outcome = await self._run([RepositoryMatched(_match("/a"))], terminal="cancel")
        assert outcome.cancelled is True
        assert outcome.matched_paths == {Path("/a")}

    @pytest.mark.asyncio
    async def test_warnings_hidden_when_quiet(self, capsys):
        await self._run([ScanWarning(Path("/secret"), "Permission denied")],
                        output=ConsoleOutputHandler(), verbosity=Verbosity.QUIET)
        assert "/secret" not in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_warnings_shown_when_verbose(self, capsys):
        await self._run([ScanWarning(Path("/secret"), "Permission denied")],
                        output=ConsoleOutputHandler(), verbosity=Verbosity.WARNINGS)
        out = capsys.readouterr().out
        assert "/secret" in out
        assert "Permission denied" in out

    @pytest.mark.asyncio
    async def test_trace_prints_visited_directories(self, capsys):
        await self._run([DirectoryVisited(Path("/root/deep"))],
                        output=ConsoleOutputHandler(verbose=True), verbosity=Verbosity.TRACE)
        assert "Scanning: /root/deep" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_matches_streamed_when_progress_shown(self, capsys):
        await self._run([RepositoryMatched(_match("/root/a"))],
                        output=ConsoleOutputHandler(), show_progress=True)
        out = capsys.readouterr().out
        assert "/root/a" in out
        assert "git@github.com:x/y.git" in out

    @pytest.mark.asyncio
    async def test_matches_not_streamed_without_progress(self, capsys):
        await self._run([RepositoryMatched(_match("/root/a"))], output=ConsoleOutputHandler())
        assert "/root/a" not in capsys.readouterr().out
