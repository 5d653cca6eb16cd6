"""Serialized, superseding writes to a Magic Blue bulb.

Dragging a color wheel fires hue, saturation and brightness changes within
milliseconds of each other. Each of them produces a full color frame, so only
the newest queued frame of a kind is worth sending. Writes are kept in one
"latest pending" slot per kind (power, color) and drained by a single task,
so at most one frame is on the radio at any time.

A queued write that gets replaced before it reaches the transport resolves
right away with WriteOutcome.SUPERSEDED. Once a frame has been handed to the
transport its outcome belongs to its own caller. A frame queued while an
identical frame of its kind was on the radio resolves as SENT without a
second write.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum

from bleak.exc import BleakError

from .connection import BulbConnection
from .const import LOGGER
from .exceptions import MagicBlueConnectionError, MagicBlueError, MagicBlueWriteError


class WriteKind(StrEnum):
    """Purpose of a frame; a newer frame supersedes an older one of its kind."""

    POWER = "power"
    COLOR = "color"


class WriteOutcome(StrEnum):
    """How a submitted frame was resolved."""

    SENT = "sent"
    SUPERSEDED = "superseded"


@dataclass
class PendingWrite:
    """A frame waiting for the transport."""

    kind: WriteKind
    frame: bytes
    generation: int
    future: asyncio.Future[WriteOutcome]


@dataclass
class SentFrame:
    """The last frame of a kind that reached the bulb."""

    frame: bytes
    # connect_count of the link it went out on
    link: int
    # newest generation submitted before the write completed
    horizon: int


class WriteCoordinator:
    """Sole owner of the write path of one bulb."""

    def __init__(self, connection: BulbConnection) -> None:
        """Initialize the coordinator."""
        self._connection = connection
        # Insertion ordered: the oldest still-pending kind is drained first
        self._slots: dict[WriteKind, PendingWrite] = {}
        self._generation = 0
        self._drain_task: asyncio.Task[None] | None = None
        self._in_flight: PendingWrite | None = None
        self._last_sent: dict[WriteKind, SentFrame] = {}

        self._frames_sent = 0
        self._frames_superseded = 0
        self._frames_repeated = 0
        self._write_failures = 0

    @property
    def in_flight(self) -> PendingWrite | None:
        """Return the write currently on the transport, if any."""
        return self._in_flight

    @property
    def pending_kinds(self) -> list[WriteKind]:
        """Return the kinds still queued, oldest first."""
        return list(self._slots)

    @property
    def frames_sent(self) -> int:
        """Return the number of frames written."""
        return self._frames_sent

    @property
    def frames_superseded(self) -> int:
        """Return the number of frames dropped in favor of a newer one."""
        return self._frames_superseded

    @property
    def frames_repeated(self) -> int:
        """Return the number of frames resolved without rewriting them."""
        return self._frames_repeated

    @property
    def write_failures(self) -> int:
        """Return the number of failed writes."""
        return self._write_failures

    async def submit(self, kind: WriteKind, frame: bytes) -> WriteOutcome:
        """Queue a frame and wait until it is sent or superseded.

        Raises:
            MagicBlueUnboundDeviceError: If the bulb was not discovered yet
            MagicBlueConnectionError: If connecting failed
            MagicBlueWriteError: If the transport rejected the write
        """
        loop = asyncio.get_running_loop()
        self._generation += 1
        pending = PendingWrite(kind, bytes(frame), self._generation, loop.create_future())

        previous = self._slots.pop(kind, None)
        if previous is not None:
            self._supersede(previous, pending)
        self._slots[kind] = pending

        if self._drain_task is None or self._drain_task.done():
            self._drain_task = loop.create_task(self._drain())

        return await pending.future

    def _supersede(self, previous: PendingWrite, newer: PendingWrite) -> None:
        self._frames_superseded += 1
        LOGGER.debug(
            "%s write #%d superseded by #%d for %s",
            previous.kind,
            previous.generation,
            newer.generation,
            self._connection.identity.address,
        )
        if not previous.future.done():
            previous.future.set_result(WriteOutcome.SUPERSEDED)

    async def _drain(self) -> None:
        """Send queued frames one at a time until the slots are empty."""
        address = self._connection.identity.address
        while self._slots:
            kind = next(iter(self._slots))
            pending = self._slots[kind]
            if pending.future.done():
                # Caller went away before we got to it
                del self._slots[kind]
                continue

            try:
                client = await self._connection.ensure_connected()
            except MagicBlueError as err:
                self._fail_queued(kind, pending, err)
                continue
            except Exception as err:
                LOGGER.error(
                    "Unexpected error connecting to %s: %s (type: %s)",
                    address,
                    err,
                    type(err).__name__,
                )
                self._fail_queued(kind, pending, MagicBlueConnectionError(address, str(err)))
                continue

            if self._slots.get(kind) is not pending:
                # Superseded while we were connecting; pick up the newer one
                continue
            del self._slots[kind]

            if self._is_repeat(pending):
                self._frames_repeated += 1
                LOGGER.debug(
                    "%s write #%d repeats the frame just sent to %s, skipping",
                    kind,
                    pending.generation,
                    address,
                )
                if not pending.future.done():
                    pending.future.set_result(WriteOutcome.SENT)
                continue

            self._in_flight = pending
            try:
                char = self._connection.write_characteristic(client)
                LOGGER.debug(
                    "Writing %s to %s handle 0x%04X",
                    pending.frame.hex(),
                    address,
                    char.handle,
                )
                await client.write_gatt_char(char, pending.frame, response=False)
            except MagicBlueError as err:
                await self._write_failed(pending, err)
            except (BleakError, TimeoutError, OSError) as err:
                LOGGER.error("Failed to write %s frame to %s: %s", kind, address, err)
                await self._write_failed(pending, MagicBlueWriteError(address, str(err)))
            except Exception as err:
                LOGGER.error(
                    "Unexpected error writing %s frame to %s: %s (type: %s)",
                    kind,
                    address,
                    err,
                    type(err).__name__,
                )
                await self._write_failed(pending, MagicBlueWriteError(address, str(err)))
            else:
                self._frames_sent += 1
                self._last_sent[kind] = SentFrame(
                    pending.frame, self._connection.connect_count, self._generation
                )
                if not pending.future.done():
                    pending.future.set_result(WriteOutcome.SENT)
            finally:
                self._in_flight = None

    def _is_repeat(self, pending: PendingWrite) -> bool:
        """Return True if the frame was queued while an identical one was sent."""
        last = self._last_sent.get(pending.kind)
        return (
            last is not None
            and last.frame == pending.frame
            and last.link == self._connection.connect_count
            and pending.generation <= last.horizon
        )

    def _fail_queued(self, kind: WriteKind, pending: PendingWrite, err: Exception) -> None:
        if self._slots.get(kind) is pending:
            del self._slots[kind]
            _set_exception(pending, err)

    async def _write_failed(self, pending: PendingWrite, err: MagicBlueError) -> None:
        self._write_failures += 1
        self._last_sent.pop(pending.kind, None)
        # Drop the link so the next write starts from a fresh connect
        await self._connection.disconnect()
        _set_exception(pending, err)

    async def async_shutdown(self) -> None:
        """Cancel every unfinished write and stop the drain task."""
        pending_writes = list(self._slots.values())
        if self._in_flight is not None:
            pending_writes.append(self._in_flight)
        for pending in pending_writes:
            if not pending.future.done():
                pending.future.cancel()
        self._slots.clear()

        if self._drain_task is not None and not self._drain_task.done():
            self._drain_task.cancel()
            try:
                await self._drain_task
            except asyncio.CancelledError:
                pass
        self._drain_task = None


def _set_exception(pending: PendingWrite, err: BaseException) -> None:
    if not pending.future.done():
        pending.future.set_exception(err)
