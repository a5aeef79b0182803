"""Track resolution and playlist synthesis for AI-generated playlists."""
