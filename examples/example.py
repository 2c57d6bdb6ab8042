"""aiobeefmote example: serve an in-memory player on the default port."""
import logging
from os.path import abspath, dirname
from sys import path
import time


path.insert(1, dirname(dirname(abspath(__file__))))

# pylint: disable=wrong-import-position
from aiobeefmote import MemoryPlayer, PlaybackState, PlayerEvent, RemoteServer  # noqa: E402
from aiobeefmote.const import CONF_PORT  # noqa: E402

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)-15s %(levelname)-5s %(name)s -- %(message)s",
)

LOGGER = logging.getLogger("example")


def main():
    """Run code example."""
    player = MemoryPlayer(config={CONF_PORT: "49160"})
    player.add_playlist(
        "Lateralus",
        [
            {"artist": "Tool", "album": "Lateralus", "title": "The Grudge", "track_number": "01", "duration": 515},
            {"artist": "Tool", "album": "Lateralus", "title": "Schism", "track_number": "05", "duration": 408},
            {"artist": "Tool", "album": "Lateralus", "title": "Parabola", "track_number": "07", "duration": 363},
        ],
    )
    player.add_playlist(
        "Kind of Blue",
        [
            {"artist": "Miles Davis", "album": "Kind of Blue", "title": "So What", "track_number": "01", "duration": 562},
            {"artist": "Miles Davis", "album": "Kind of Blue", "title": "Blue in Green", "track_number": "03", "duration": 337},
        ],
    )

    # log events the way a host would see them
    def on_event(evt: PlayerEvent):
        LOGGER.debug(f"Received event {evt.type.value}: {evt.data}")

    player.subscribe(on_event)

    server = RemoteServer(player)
    player.on_terminate = server.stop
    server.start()
    LOGGER.info("Connect with e.g. `nc localhost 49160`, type exit to quit")
    try:
        while not player.terminated.wait(1):
            # pretend the host advances playback
            track = player.current_track
            if track is None or player.playback_state() != PlaybackState.PLAYING:
                continue
            if player.get_position() >= track.duration:
                player.next()
            else:
                player.set_position(player.get_position() + 1)
    finally:
        server.stop()


try:
    main()
except KeyboardInterrupt:
    pass
