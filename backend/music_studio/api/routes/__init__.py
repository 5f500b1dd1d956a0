# API Routes Module
from music_studio.api.routes import (
    users,
    entitlements,
    subscriptions,
    payments,
    songs,
    practice,
    lyrics,
    music,
)

__all__ = [
    "users",
    "entitlements",
    "subscriptions",
    "payments",
    "songs",
    "practice",
    "lyrics",
    "music",
]
