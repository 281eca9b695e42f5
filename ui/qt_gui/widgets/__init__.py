"""
Custom widgets for the TrackShelf Qt GUI.

Standalone, reusable widgets that can be embedded in various panels.
"""
