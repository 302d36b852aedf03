"""
Voice module exports.

Voice synthesis: lists voices and turns a narration transcript into speech.
"""

from .client import VoiceClient, create_voice_client

__all__ = [
    "VoiceClient",
    "create_voice_client",
]
