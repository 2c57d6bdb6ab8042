"""Constants for aiobeefmote."""

from __future__ import annotations

DEFAULT_PORT = 49160
LISTEN_BACKLOG = 1
# seconds to wait for a client or for client data before re-checking cancellation
WAIT_CLIENT = 1
READ_BUFSIZE = 1000
ENCODING = "utf-8"

VOLUME_STEP = 5
SEEK_STEP = 5

# host configuration keys
CONF_IP = "beefmote.ip"
CONF_PORT = "beefmote.port"
CONF_DISABLE = "beefmote.disable"
OPTION_STOP_AFTER_CURRENT = "playlist.stop_after_current"

MSG_INVALID_COMMAND = "Please type a valid command"
MSG_NO_CURRENT_TRACK = "No current track"
MSG_NO_PLAYLISTS = "No playlists"
MSG_NO_PLAYLIST = "No current playlist"
MSG_PLAYLIST_OUT_OF_BOUNDS = "Playlist index out of bounds"
MSG_TRACK_OUT_OF_BOUNDS = "Track index out of bounds"
MSG_INVALID_SEARCH_INDEX = "Invalid search index"
MSG_INVALID_ADDRESS = "Invalid track address"
MSG_NOTHING_FOUND = "(nothing was found)"
MSG_PLAYLIST_CHANGED = (
    "The current playlist content changed; you may want to get the tracklist again."
)
MSG_COMMAND_FAILED = "Error while processing command"
