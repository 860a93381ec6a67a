"""apz: terminal audio player with waveform and spectrum views."""

__version__ = "0.1.0"
