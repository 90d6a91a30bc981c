import os

from .constants import DEFAULT_ROUND_COUNT


class Config:
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '4000'))
    # Newline separated word list; the built-in demo words are used when unset
    DICTIONARY_PATH = os.environ.get('DICTIONARY_PATH')
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '6'))
    DEFAULT_ROUNDS = int(os.environ.get('DEFAULT_ROUNDS', str(DEFAULT_ROUND_COUNT)))
    # Mobile browsers may background a tab for a while before reconnecting
    DISCONNECT_GRACE_SEC = float(os.environ.get('DISCONNECT_GRACE_SEC', '300'))
    # Hold the final scoreboard before the room returns to the lobby
    NEW_GAME_DELAY_SEC = float(os.environ.get('NEW_GAME_DELAY_SEC', '5'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',') if o.strip()]
