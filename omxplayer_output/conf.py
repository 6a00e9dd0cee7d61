import os

import environ


class ImproperlyConfigured(Exception):
    pass


class Settings(dict):
    def __getattr__(self, item):
        return self.get(item)

    def __setattr__(self, key, value):
        self[key] = value


def _typed(getter, key, default):
    try:
        return getter(key, default=default)
    except ValueError as e:
        raise ImproperlyConfigured("Set {} to a valid value: {}".format(key, e))


def setup_settings():
    env = environ.Env()
    env_file = os.environ.get(
        "OMXPLAYER_OUTPUT_ENV_FILE", "/etc/omxplayer-output.env"
    )
    if os.path.exists(env_file):
        env.read_env(env_file=env_file)
    try:
        DEBUG = _typed(env.bool, "DEBUG", False)
        return Settings(
            DEBUG=DEBUG,
            PLAYER_BINARY=env("PLAYER_BINARY", default="omxplayer.bin"),
            PLAYER_AUDIO_OUTPUT=env("PLAYER_AUDIO_OUTPUT", default="both"),
            STOP_TIMEOUT=_typed(env.float, "STOP_TIMEOUT", 5.0),
            KILL_TIMEOUT=_typed(env.float, "KILL_TIMEOUT", 2.0),
            OUTPUT_MODULE=env("OUTPUT_MODULE", default="omxplayer"),
            REDIS_HOST=env("REDIS_HOST", default="localhost"),
            REDIS_PORT=_typed(env.int, "REDIS_PORT", 6379),
            REDIS_DB=_typed(env.int, "REDIS_DB", 0),
            SIGNAL_PATTERN=env("SIGNAL_PATTERN", default="*"),
            PLAYER_REDIS_CHANNEL=env(
                "PLAYER_REDIS_CHANNEL", default="PLAYER_REDIS_CHANNEL"
            ),
            RENDERER_REDIS_CHANNEL=env(
                "RENDERER_REDIS_CHANNEL", default="RENDERER_REDIS_CHANNEL"
            ),
            LOGGING_CONFIG={
                "version": 1,
                "disable_existing_loggers": True,
                "formatters": {
                    "standard": {
                        "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
                    },
                },
                "handlers": {
                    "default": {
                        "level": "DEBUG" if DEBUG else "INFO",
                        "formatter": "standard",
                        "class": "logging.StreamHandler",
                    },
                },
                "loggers": {
                    "": {
                        "handlers": ["default"],
                        "level": "DEBUG" if DEBUG else "INFO",
                    }
                },
            },
        )
    except KeyError as e:
        raise ImproperlyConfigured("Set {} environment variable.".format(e))


settings = setup_settings()
