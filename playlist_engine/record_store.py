"""
Local playlist store backed by a JSON file.

Stands in for the hosted record store: get/insert/update/delete by id, plus
writing back the remote playlist id after an export.
"""

import json
import logging
import os
import threading
import uuid

from .models import PlaylistRecord

log = logging.getLogger(__name__)


class PlaylistStore:
    def __init__(self, path):
        self.path = path
        self._lock = threading.Lock()

    def _load(self):
        if os.path.exists(self.path):
            try:
                with open(self.path, 'r') as f:
                    return json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                log.warning(f'Could not read playlist store {self.path}: {e}')
                return {}
        return {}

    def _save(self, data):
        with open(self.path, 'w') as f:
            json.dump(data, f, indent=2)

    def get_playlist(self, playlist_id):
        """Return the PlaylistRecord for playlist_id, or None."""
        raw = self._load().get(str(playlist_id))
        return PlaylistRecord.from_dict(raw) if raw else None

    def insert_playlist(self, playlist):
        """Store a PlaylistRecord, assigning an id when it has none."""
        with self._lock:
            data = self._load()
            if not playlist.id:
                playlist.id = uuid.uuid4().hex
            data[playlist.id] = playlist.to_dict()
            self._save(data)
        return playlist.id

    def update_playlist(self, playlist_id, **fields):
        with self._lock:
            data = self._load()
            record = data.get(str(playlist_id))
            if record is None:
                raise KeyError(f'Playlist {playlist_id} not found')
            record.update(fields)
            self._save(data)

    def update_playlist_remote_id(self, playlist_id, remote_id, platform='spotify'):
        self.update_playlist(playlist_id, **{f'{platform}_id': remote_id})

    def delete_playlist(self, playlist_id):
        with self._lock:
            data = self._load()
            removed = data.pop(str(playlist_id), None) is not None
            if removed:
                self._save(data)
        return removed
