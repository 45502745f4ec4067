#  Copyright 2022 Nicolas Maltais
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

from pathlib import Path
from typing import Union

PathLike = Union[str, Path]

# multipliers for the size suffixes accepted by the GNU linker
SIZE_SUFFIXES = {
    "K": 1024,
    "M": 1024 * 1024,
}


def parse_linker_number(s: str) -> int:
    """Parse an integer literal the way the GNU linker does: hexadecimal with a `0x` prefix,
    octal with a leading zero, decimal otherwise, optionally followed by a K or M suffix."""
    s = s.strip()
    multiplier = 1
    if s and s[-1].upper() in SIZE_SUFFIXES:
        multiplier = SIZE_SUFFIXES[s[-1].upper()]
        s = s[:-1]
    if s.lower().startswith("0x"):
        value = int(s[2:], 16)
    elif len(s) > 1 and s.startswith("0"):
        value = int(s[1:], 8)
    else:
        value = int(s, 10)
    return value * multiplier


def readable_capacity(size: int) -> str:
    """Format a memory capacity with binary units, the way linker scripts usually declare it:
    256K is printed as 256 KiB. Sizes that aren't a whole number of KiB are printed in bytes."""
    for unit, multiplier in (("MiB", SIZE_SUFFIXES["M"]), ("KiB", SIZE_SUFFIXES["K"])):
        if size >= multiplier and size % multiplier == 0:
            return f"{size // multiplier} {unit}"
    return f"{size} B"
