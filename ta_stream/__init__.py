# -*- coding: utf-8 -*-
import logging
from importlib.metadata import PackageNotFoundError, version as _version

try:
    version = _version("ta-stream")
except PackageNotFoundError:
    version = "0.0.0"

from ta_stream.stateful import *
from ta_stream.stateful import __all__ as stateful_all

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "version",
]

__all__ += stateful_all
