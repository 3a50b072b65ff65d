import gc
import threading

import numpy as np
import pytest
import soundfile as sf

from karaoke.audio.channels import CommandChannel, StateSlot
from karaoke.audio.commands import LoadMusic, Pause, Play, Seek, SetVolume
from karaoke.audio.sources import StreamFormat
from karaoke.audio.state import NOT_PLAYING, Playing, extrapolate_position
from karaoke.core.errors import ChannelDisconnected


def test_commands_arrive_in_send_order():
    channel = CommandChannel()
    sender = channel.sender()
    receiver = channel.receiver()
    sender.send(Seek(1.0))
    sender.send(Play())
    sender.send(SetVolume(0.2))
    assert list(receiver.drain()) == [Seek(1.0), Play(), SetVolume(0.2)]


def test_drain_on_empty_queue_returns_immediately():
    channel = CommandChannel()
    sender = channel.sender()
    assert list(channel.receiver().drain()) == []
    assert not sender.closed


def test_disconnect_after_last_sender_closes():
    channel = CommandChannel()
    sender = channel.sender()
    receiver = channel.receiver()
    sender.send(Pause())
    sender.close()

    drained = receiver.drain()
    # queued commands are still delivered first
    assert next(drained) == Pause()
    with pytest.raises(ChannelDisconnected):
        next(drained)


def test_dropped_sender_disconnects():
    channel = CommandChannel()
    sender = channel.sender()
    del sender
    gc.collect()
    with pytest.raises(ChannelDisconnected):
        list(channel.receiver().drain())


def test_clone_keeps_channel_open():
    channel = CommandChannel()
    sender = channel.sender()
    other = sender.clone()
    sender.close()
    assert channel.sender_count == 1
    other.send(Play())
    assert list(channel.receiver().drain()) == [Play()]


def test_close_is_idempotent():
    channel = CommandChannel()
    keep = channel.sender()
    with channel.sender() as sender:
        pass
    sender.close()
    assert channel.sender_count == 1
    assert keep.closed is False


def test_send_on_closed_sender_raises():
    sender = CommandChannel().sender()
    sender.close()
    with pytest.raises(ChannelDisconnected):
        sender.send(Play())


def test_many_producers_keep_their_own_order():
    channel = CommandChannel()
    senders = [channel.sender() for _ in range(4)]

    def produce(sender, base):
        for i in range(200):
            sender.send(Seek(base + i))

    threads = [threading.Thread(target=produce, args=(s, n * 1000)) for n, s in enumerate(senders)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    received = [c.time for c in channel.receiver().drain()]
    assert len(received) == 800
    for n in range(4):
        mine = [t for t in received if n * 1000 <= t < (n + 1) * 1000]
        assert mine == [n * 1000 + i for i in range(200)]


def test_load_music_decodes_on_sender_side(tmp_path):
    path = tmp_path / "tone.wav"
    sf.write(str(path), np.zeros((4410, 1), dtype=np.float32), 44100)

    channel = CommandChannel()
    sender = channel.sender(StreamFormat(44100, 2))
    assert sender.load_music(str(path)) is True

    (command,) = list(channel.receiver().drain())
    assert isinstance(command, LoadMusic)
    assert command.source.data.shape == (4410, 2)


def test_load_music_failure_sends_nothing(tmp_path):
    channel = CommandChannel()
    sender = channel.sender(StreamFormat(44100, 2))
    assert sender.load_music(str(tmp_path / "missing.ogg")) is False
    assert list(channel.receiver().drain()) == []


def test_state_slot_latest_value_wins():
    slot = StateSlot(NOT_PLAYING)
    assert slot.read() is NOT_PLAYING
    slot.publish(Playing(1.0, 0.0))
    slot.publish(Playing(2.0, 5.0))
    assert slot.read() == Playing(2.0, 5.0)


def test_extrapolate_position():
    assert extrapolate_position(NOT_PLAYING, 10.0) is None
    state = Playing(reference_instant=100.0, playback_time=12.0)
    assert extrapolate_position(state, 100.5) == 12.5
    # before the buffer reaches the speaker
    assert extrapolate_position(state, 99.75) == 11.75
