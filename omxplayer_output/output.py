import importlib
import logging

from typing import List, Tuple

from omxplayer_output.output_modules.base import OutputModule


logger = logging.getLogger(__name__)


OUTPUT_MODULES = {
    "omxplayer": "omxplayer_output.output_modules.omxplayer.OMXPlayerOutput",
    "dummy": "omxplayer_output.output_modules.dummy.DummyOutput",
}


class UnknownOutputModule(Exception):
    pass


def _import_class(path: str):
    module_path, class_name = path.rsplit(".", 1)
    return getattr(importlib.import_module(module_path), class_name)


def load_output_module(name: str, **kwargs) -> OutputModule:
    try:
        path = OUTPUT_MODULES[name]
    except KeyError:
        raise UnknownOutputModule(
            "No output module named {!r}, available: {}".format(
                name, ", ".join(sorted(OUTPUT_MODULES))
            )
        )
    logger.info("Using output module: %s", name)
    return _import_class(path)(**kwargs)


def describe_modules() -> List[Tuple[str, str]]:
    return [
        (name, _import_class(path).description)
        for name, path in sorted(OUTPUT_MODULES.items())
    ]
