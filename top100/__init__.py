"""Top 100 rankings: match hosted audio files to Spotify and rank by popularity."""
