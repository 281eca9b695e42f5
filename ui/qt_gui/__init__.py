"""Qt GUI: main window, background threads and waveform widgets."""
