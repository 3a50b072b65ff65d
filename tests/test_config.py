import json
import logging

import pytest

from karaoke.core.config import AudioConfig, EditorConfig, MetronomeConfig
from karaoke.core.errors import ConfigLoadError
from karaoke.core.logging import configure_logging


def test_defaults():
    config = EditorConfig()
    assert config.audio.click_duration == 0.05
    assert config.audio.clip_level == 1.0
    assert config.metronome.downbeat_frequency == 1244.51
    assert config.metronome.beat_frequency == 739.99


def test_save_and_load(tmp_path):
    path = str(tmp_path / "config.json")
    config = EditorConfig(
        audio=AudioConfig(device="USB Audio", music_volume=0.7, latency=0.05),
        metronome=MetronomeConfig(beat_frequency=440.0),
        offset=1.25,
    )
    config.save(path)
    assert EditorConfig.load(path) == config


def test_partial_file_keeps_defaults():
    config = EditorConfig.from_dict({"audio": {"effect_volume": 1}})
    assert config.audio.effect_volume == 1.0
    assert isinstance(config.audio.effect_volume, float)
    assert config.audio.music_volume == 0.4


@pytest.mark.parametrize("data", [
    {"volume": 1.0},
    {"audio": {"bogus": 1}},
    {"audio": {"music_volume": "loud"}},
    {"audio": {"blocksize": True}},
    {"audio": []},
    {"offset": "late"},
    {"audio": {"clip_level": 1.5}},
    {"audio": {"clip_level": 0}},
    {"audio": {"max_voices": 0}},
    [],
])
def test_illegal_entries(data):
    with pytest.raises(ConfigLoadError):
        EditorConfig.from_dict(data)


def test_unreadable_files(tmp_path):
    with pytest.raises(ConfigLoadError):
        EditorConfig.load(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ConfigLoadError):
        EditorConfig.load(str(broken))


def test_to_dict_is_json():
    assert json.loads(json.dumps(EditorConfig().to_dict()))["audio"]["latency"] == "low"


def test_configure_logging_once():
    logger = configure_logging("debug")
    try:
        configure_logging(logging.INFO)
        tagged = [h for h in logger.handlers if getattr(h, "_karaoke", False)]
        assert len(tagged) == 1
        assert logger.level == logging.INFO
    finally:
        for handler in list(logger.handlers):
            if getattr(handler, "_karaoke", False):
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_configure_logging_bad_level():
    with pytest.raises(ValueError):
        configure_logging("chatty")


def test_clip_level_stays_within_full_scale():
    assert AudioConfig(clip_level=1).clip_level == 1
    with pytest.raises(ValueError):
        AudioConfig(clip_level=1.5)
    with pytest.raises(ValueError):
        AudioConfig(clip_level=-0.5)
