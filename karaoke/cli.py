# karaoke/cli.py
"""
karaoke-play - play a music file with a metronome from the command line.

    karaoke-play song.ogg --bpm 132 --offset 0.35 --start-beat 16 --seconds 20
"""

from __future__ import annotations
from typing import List, Optional
import argparse
import logging
import sys
import time

from .core.beats import BeatPosition
from .core.config import EditorConfig
from .core.errors import KaraokeError
from .core.logging import configure_logging
from .editor.formatting import beat_label, format_time
from .editor.playback import PlaybackController
from .editor.score import ScoreTiming

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="karaoke-play", description=__doc__.strip().splitlines()[0])
    parser.add_argument("music", nargs="?", help="audio file to play")
    parser.add_argument("--bpm", type=float, default=None, help="constant tempo (overrides --score)")
    parser.add_argument("--offset", type=float, default=None, help="lead-in seconds before beat 0")
    parser.add_argument("--start-beat", default="0", help="beat to start from, e.g. 16 or 33/2")
    parser.add_argument("--score", default=None, help="score timing JSON (offset, tempos, measures)")
    parser.add_argument("--config", default=None, help="configuration JSON")
    parser.add_argument("--seconds", type=float, default=10.0, help="how long to play")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--list-devices", action="store_true", help="print output devices and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    from .audio.engine import AudioEngine, list_output_devices

    if args.list_devices:
        print(list_output_devices())
        return 0
    if not args.music:
        logger.error("No music file given")
        return 2

    try:
        config = EditorConfig.load(args.config) if args.config else EditorConfig()
        timing = ScoreTiming.load(args.score) if args.score else ScoreTiming(offset=config.offset)
        if args.offset is not None:
            timing.offset = args.offset
        if args.bpm is not None:
            timing.set_tempo(0, args.bpm)
        start = BeatPosition(args.start_beat)
        engine = AudioEngine.open(config.audio)
    except (KaraokeError, ValueError) as e:
        logger.error("%s", e)
        return 1

    with engine:
        sender = engine.command_sender()
        if not sender.load_music(args.music):
            logger.warning("Continuing with the metronome only")
        controller = PlaybackController(sender, timing, config.metronome)
        controller.set_volumes(config.audio.music_volume, config.audio.effect_volume)
        controller.play_from(start)

        deadline = time.monotonic() + args.seconds
        try:
            while time.monotonic() < deadline:
                position = controller.current_position(engine)
                if position is not None and position.beat >= BeatPosition.zero():
                    label = beat_label(timing.measures, position.beat, playing=True)
                    print(f"\r{format_time(position.time)}  {label:>8}", end="", flush=True)
                time.sleep(0.05)
        except KeyboardInterrupt:
            pass
        controller.pause()
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
