import json

import redis.asyncio

from omxplayer_output.conf import settings


class Null:
    def __init__(self, *args, **kwargs):
        pass

    def __call__(self, *args, **kwargs):
        return self

    def __getattr__(self, item):
        return self

    def __setattr__(self, key, value):
        return self

    def __delattr__(self, item):
        return self

    def __repr__(self):
        return "Null()"

    def __iter__(self):
        return iter(())

    def __bool__(self):
        return False

    def __getitem__(self, item):
        return self

    def __setitem__(self, key, value):
        return self


def normalize_uri(uri):
    """
    Empty URIs mean "no source".
    """
    return uri if uri else None


def decode_redis_message(msg, logger):
    """
    Return the JSON payload of a pub/sub data message, or None for
    subscribe confirmations and undecodable payloads.
    """
    if not msg or msg["type"] not in ("message", "pmessage"):
        return None
    try:
        return json.loads(msg["data"])
    except (TypeError, ValueError) as e:
        logger.error(
            "Received invalid signal format that caused "
            "exception {}".format(e)
        )


def get_redis_conn(host=None, port=None, db=None):
    return redis.asyncio.Redis(
        host=host or settings.REDIS_HOST,
        port=port or settings.REDIS_PORT,
        db=settings.REDIS_DB if db is None else db,
        encoding="utf-8",
        decode_responses=True,
    )
