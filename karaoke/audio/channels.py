# karaoke/audio/channels.py
"""
Channels between the control thread and the real-time audio thread.

Command channel (control -> audio):
    Unbounded, multi-producer / single-consumer, FIFO. ``send`` never blocks.
    The audio thread drains it with non-blocking gets only; it must never wait
    on the queue.

State slot (audio -> control):
    Single slot, latest value wins. Publishing is one reference store and
    reading is one reference load, so neither side takes a lock.
"""

from __future__ import annotations
from typing import Generic, Iterator, Optional, TypeVar, TYPE_CHECKING
import logging
import queue
import threading
import weakref

from ..core.errors import ChannelDisconnected, DecodeError
from .commands import AudioCommand, LoadMusic

if TYPE_CHECKING:
    from .sources import StreamFormat

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CommandChannel:
    """Shared queue plus a count of live senders."""

    def __init__(self):
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._senders = 0
        self._lock = threading.Lock()

    def _acquire(self):
        with self._lock:
            self._senders += 1

    def _release(self):
        with self._lock:
            self._senders -= 1

    @property
    def sender_count(self) -> int:
        return self._senders

    def sender(self, stream_format: Optional[StreamFormat] = None) -> CommandSender:
        return CommandSender(self, stream_format)

    def receiver(self) -> CommandReceiver:
        return CommandReceiver(self)


class CommandSender:
    """
    Sending half of the command channel.

    A sender is released by ``close()`` or when it is garbage collected.
    Once every sender is gone the audio thread treats the channel as dead.
    """

    def __init__(self, channel: CommandChannel, stream_format: Optional[StreamFormat] = None):
        self._channel = channel
        self._stream_format = stream_format
        channel._acquire()
        self._finalizer = weakref.finalize(self, channel._release)

    def send(self, command: AudioCommand):
        if not self._finalizer.alive:
            raise ChannelDisconnected("send on a closed command sender")
        self._channel._queue.put_nowait(command)

    def load_music(self, path: str) -> bool:
        """
        Decode ``path`` here, on the calling thread, then hand the source over.

        Decode failures are logged and nothing is sent, so the audio thread
        keeps whatever it was playing.
        """
        from .sources import decode_music

        if self._stream_format is None:
            raise ValueError("This sender has no stream format to decode against")
        try:
            source = decode_music(path, self._stream_format)
        except DecodeError as e:
            logger.error("%s", e)
            return False
        self.send(LoadMusic(path, source))
        return True

    def clone(self) -> CommandSender:
        return CommandSender(self._channel, self._stream_format)

    def close(self):
        self._finalizer()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def __enter__(self) -> CommandSender:
        return self

    def __exit__(self, *exc):
        self.close()


class CommandReceiver:
    """Receiving half, owned by the audio thread."""

    def __init__(self, channel: CommandChannel):
        self._channel = channel

    def drain(self) -> Iterator[AudioCommand]:
        """
        Yield every queued command without blocking.

        Raises ChannelDisconnected once the queue is empty and no sender is left.
        """
        q = self._channel._queue
        while True:
            try:
                yield q.get_nowait()
            except queue.Empty:
                break
        if self._channel.sender_count <= 0 and q.empty():
            raise ChannelDisconnected("All command senders have been dropped")


class StateSlot(Generic[T]):
    """Latest-value cell. Intermediate values may be overwritten unseen."""

    def __init__(self, initial: T):
        self._value = initial

    def publish(self, value: T):
        self._value = value

    def read(self) -> T:
        return self._value
