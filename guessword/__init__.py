"""
Guessword - Word-guessing party game engine

One player reads a word, the others guess it before the countdown runs out.
The package provides:
- The round engine (word queue, score, countdown, haptic cues)
- A game loop that reacts to round events like a phone screen would
- A REST/WebSocket API for mobile clients
- A command-line interface
"""

__version__ = "0.1.0"
