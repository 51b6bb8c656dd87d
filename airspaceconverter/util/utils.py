# utility methods shared by readers and writers

import math
from datetime import datetime, timezone
from typing import List, Optional

from .. import __version__

DISCLAIMER = [
    "This file has been produced with: \"AirspaceConverter\" Version: " + __version__,
    "For info visit: http://www.alus.it/AirspaceConverter",
    "Copyrights(C) 2016-2019 Alberto Realis-Luc",
    "",
    "WARNING:",
    "AirspaceConverter is an experimental software. So, please, be aware that the output may contain errors!",
    "The users are kindly requested to report any error or discrepancy found.",
    "",
    "Disclaimer:",
    "The authors of AirspaceConverter assume no liability at all for the previous, actual or future correctness, completeness, functionality or usability",
    "of the data provided in this file and the usage of AirspaceConverter. There exists no obligation at all for the authors to continuously update",
    "or maintain the data provided. The airspace structure in this file and the data contained therein are only intended to serve as a means to facilitate",
    "familiarization with and to illustrate air space structure. This airspace structure file does not replace the pilot's obligation for preflight",
    "planning nor shall it be used as a means of support during flight. In particular, use of the this airspace structure file does not excuse the user",
    "from the responsibility to observe the current issue of any relevant AIP, AIP Supplements, NOTAM and AICs.",
    "The use of this airspace structure and/or waypoints file takes place only at the user's total own risk.",
    "Commercial use of the data provided via this airspace structure and/or waypoints file is strictly prohibited.",
    "The use of AirspaceConverter is only at complete user's own risk.",
    "Any commercial usage of AirspaceConverter is also strictly prohibited if not authorized by its owner.",
    "",
    "Error reports, complaints and suggestions please email to: info@alus.it",
]


def creation_date_string(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return "This file was created on: " + now.strftime("%a %d %B %Y at %H:%M:%S UTC")


def header_lines(prefix: str = "") -> List[str]:
    """Disclaimer and creation date, each line prefixed with a comment marker."""
    lines = DISCLAIMER + ["", creation_date_string(), ""]
    return [(prefix + line).rstrip() if line else prefix.rstrip() for line in lines]


def safe_float(s, default: Optional[float] = None) -> Optional[float]:
    """Finite float value of s, default for anything else including nan and inf."""
    try:
        value = float(str(s).strip())
    except (ValueError, TypeError):
        return default
    return value if math.isfinite(value) else default


def safe_int(s, default: Optional[int] = None) -> Optional[int]:
    value = safe_float(s)
    return default if value is None else int(value)


def decode_text(data: bytes) -> str:
    """Decode file content as UTF-8, falling back to Latin-1."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")
