# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Error kinds and the advisory channel.

Two conditions are distinguished:

* ``ShapeError`` aborts the current call. It is raised when an argument does
  not carry the expected components (wrong arity, wrong trailing dimension,
  non-finite matrix entries).
* ``ColorAdvisory`` reports a soft input that has been repaired to a
  documented default (unknown surround name, ``x0`` outside (0, 1],
  non-positive background luminance, ...). Advisories never abort.

Advisories are routed through :func:`advise`. When the caller injects a
``logger`` callable it receives the one-line message. Otherwise the message is
issued with ``warnings.warn`` under the ``ColorAdvisory`` category. This
module appends an ``ignore`` entry for that category to the end of the filter
list, so advisories are discarded unless the application (or a ``-W`` option)
installs its own filter, before or after import::

    import warnings
    from skein.diagnostics import ColorAdvisory
    warnings.simplefilter("default", ColorAdvisory)
"""

from __future__ import annotations

import warnings
from typing import Callable, Optional, TypeAlias

__all__ = [
    "ShapeError",
    "ColorAdvisory",
    "AdvisoryLogger",
    "advise",
]

AdvisoryLogger: TypeAlias = Callable[[str], None]


class ShapeError(ValueError):
    """An argument does not carry the expected color components."""


class ColorAdvisory(UserWarning):
    """A soft-invalid input was repaired to its documented default."""


# Lowest-priority filter: any filter installed by the application wins.
warnings.filterwarnings("ignore", category=ColorAdvisory, append=True)


def advise(message: str, logger: Optional[AdvisoryLogger] = None,
           stacklevel: int = 3) -> None:
    """
    Emit a one-line domain advisory.

    Args:
        message: Human readable description of the repair that took place.
        logger: Optional sink. When given it receives ``message`` and the
            warnings machinery is bypassed.
        stacklevel: Forwarded to ``warnings.warn`` so the advisory points at
            the caller of the repairing function.
    """
    if logger is not None:
        logger(message)
        return
    warnings.warn(message, ColorAdvisory, stacklevel=stacklevel)
