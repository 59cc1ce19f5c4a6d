"""
NameSayer - pronunciation recordings for names.

Keeps database and user-captured recordings per name, picks the best one
for playback, and drives ffmpeg for capture and normalisation.
"""

__version__ = "0.1.0"
