"""TrackShelf core: settings, services, storage and domain entities."""
