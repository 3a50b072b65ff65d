from types import SimpleNamespace

import numpy as np
import pytest
import soundfile as sf

try:
    import sounddevice as sd
except OSError as e:  # PortAudio shared library missing
    pytest.skip(f"sounddevice unavailable: {e}", allow_module_level=True)

from karaoke import cli
from karaoke.audio.commands import LoadMusic, Play, Seek, SetVolume
from karaoke.audio.engine import AudioEngine
from karaoke.audio.formats import SampleFormat
from karaoke.audio.sources import MusicSource, StreamFormat
from karaoke.audio.state import NOT_PLAYING, Playing
from karaoke.core.config import AudioConfig
from karaoke.core.errors import AudioError


DEVICE = {'name': 'Fake Output', 'max_output_channels': 6, 'default_samplerate': 1000.0}


class FakeStream:
    """Stands in for sd.OutputStream; the test calls the callback by hand."""
    fail_on_start = False

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.active = False
        self.closed = False

    def start(self):
        if self.fail_on_start:
            raise sd.PortAudioError("device busy")
        self.active = True

    def stop(self):
        self.active = False

    def close(self):
        self.closed = True


@pytest.fixture
def fake_device(monkeypatch):
    monkeypatch.setattr(sd, 'query_devices', lambda device=None, kind=None: DEVICE)
    monkeypatch.setattr(sd, 'check_output_settings', lambda **kwargs: None)
    monkeypatch.setattr(sd, 'OutputStream', FakeStream)
    monkeypatch.setattr(FakeStream, 'fail_on_start', False)
    return monkeypatch


def time_info(current=0.0, dac=0.0):
    return SimpleNamespace(currentTime=current, outputBufferDacTime=dac)


def test_open_probes_default_output(fake_device):
    engine = AudioEngine.open()
    stream = engine._stream
    assert engine.stream_format == StreamFormat(1000, 2)
    assert engine.sample_format is SampleFormat.FLOAT32
    assert stream.kwargs['channels'] == 2
    assert stream.kwargs['samplerate'] == 1000
    assert stream.kwargs['dtype'] == 'float32'
    assert engine.is_running
    assert engine.playback_state() is NOT_PLAYING
    assert engine.playback_position() is None

    engine.close()
    assert stream.closed
    assert not engine.is_running
    assert engine.command_sender().closed


def test_first_supported_format_wins(fake_device):
    def check(**kwargs):
        if kwargs['dtype'] != 'int16':
            raise sd.PortAudioError("unsupported")
    fake_device.setattr(sd, 'check_output_settings', check)

    with AudioEngine.open() as engine:
        assert engine.sample_format is SampleFormat.INT16


def test_no_output_device(fake_device):
    def missing(device=None, kind=None):
        raise sd.PortAudioError("no device")
    fake_device.setattr(sd, 'query_devices', missing)
    with pytest.raises(AudioError):
        AudioEngine.open()


def test_no_usable_configuration(fake_device):
    def reject(**kwargs):
        raise ValueError("nothing works")
    fake_device.setattr(sd, 'check_output_settings', reject)
    with pytest.raises(AudioError):
        AudioEngine.open()


def test_stream_start_failure(fake_device):
    fake_device.setattr(FakeStream, 'fail_on_start', True)
    with pytest.raises(AudioError):
        AudioEngine.open()


def test_bad_stream_arguments(fake_device):
    def reject(**kwargs):
        raise ValueError(f"Invalid latency: {kwargs['latency']!r}")
    fake_device.setattr(sd, 'OutputStream', reject)
    with pytest.raises(AudioError):
        AudioEngine.open(AudioConfig(latency="sluggish"))


def test_stream_callback_publishes_position(fake_device):
    with AudioEngine.open() as engine:
        sender = engine.command_sender()
        sender.send(Seek(2.0))
        sender.send(Play())

        outdata = np.zeros((64, 2), dtype=np.float32)
        engine._stream_callback(outdata, 64, time_info(0.0, 0.01), None)
        state = engine.playback_state()
        assert isinstance(state, Playing)
        assert state.playback_time == 2.0
        assert abs(engine.playback_position() - 2.0) < 0.5


def test_stream_callback_writes_device_format(fake_device):
    config = AudioConfig(preferred_dtype='int16')
    with AudioEngine.open(config) as engine:
        fmt = engine.stream_format
        sender = engine.command_sender()
        sender.send(LoadMusic("half", MusicSource(np.full((100, 2), 0.5, dtype=np.float32), fmt)))
        sender.send(SetVolume(1.0))
        sender.send(Play())

        outdata = np.zeros((32, 2), dtype=np.int16)
        engine._stream_callback(outdata, 32, time_info(), None)
        assert np.all(outdata == 16383)


def test_stream_callback_aborts_when_disconnected(fake_device):
    engine = AudioEngine.open()
    engine.command_sender().close()
    outdata = np.zeros((64, 2), dtype=np.float32)
    with pytest.raises(sd.CallbackAbort):
        engine._stream_callback(outdata, 64, time_info(), None)
    engine.close()


# =============================================================================
# Command line
# =============================================================================

def test_cli_requires_music(fake_device):
    assert cli.main(["--log-level", "WARNING"]) == 2


def test_cli_plays_for_zero_seconds(fake_device, tmp_path):
    path = tmp_path / "song.wav"
    sf.write(str(path), np.zeros((1000, 2), dtype=np.float32), 1000)
    assert cli.main([str(path), "--bpm", "90", "--start-beat", "3/2", "--seconds", "0",
                     "--log-level", "WARNING"]) == 0


def test_cli_reports_device_errors(fake_device):
    def missing(device=None, kind=None):
        raise sd.PortAudioError("no device")
    fake_device.setattr(sd, 'query_devices', missing)
    assert cli.main(["song.wav", "--log-level", "WARNING"]) == 1


def test_list_devices(fake_device, capsys):
    assert cli.main(["--list-devices", "--log-level", "WARNING"]) == 0
    assert "Fake Output" in capsys.readouterr().out
