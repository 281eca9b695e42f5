"""TrackShelf user interface."""
