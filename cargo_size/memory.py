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

# Reads the device memory capacity from the MEMORY directive of a linker script, usually
# the `memory.x` file found in embedded crates:
#
#   MEMORY
#   {
#     FLASH : ORIGIN = 0x08000000, LENGTH = 256K
#     RAM : ORIGIN = 0x20000000, LENGTH = 64K
#   }
#
# The file is optional, so nothing in here is allowed to fail: a missing or invalid
# file simply means that the capacity is unknown.

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from cargo_size.utils import PathLike, parse_linker_number

FLASH_REGION = "flash"
RAM_REGION = "ram"

MEMORY_DIRECTIVE_RE = re.compile(r"\bMEMORY\s*\{(?P<body>[^}]*)}")
REGION_RE = re.compile(r"^(?P<name>[A-Za-z_.][\w.]*)\s*(?:\((?P<attrs>[^)]*)\))?\s*:\s*"
                       r"(?:ORIGIN|org|o)\s*=\s*(?P<origin>[^,]+?)\s*,\s*"
                       r"(?:LENGTH|len|l)\s*=\s*(?P<length>.+?)\s*$")
COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
TOKEN_RE = re.compile(r"\s*(?:(?P<number>(?:0[xX][0-9a-fA-F]+|\d+)[KkMm]?)|(?P<op>[-+*/()]))")


class MemoryLayoutError(Exception):
    pass


@dataclass(frozen=True)
class MemoryRegion:
    name: str
    origin: int
    length: int
    attributes: str = ""


@dataclass(frozen=True)
class MemoryLayout:
    """Capacity of the device memories, in bytes."""
    flash: int
    ram: int


class _ExpressionParser:
    """Evaluates the constant integer expressions allowed for ORIGIN and LENGTH:
    numbers, the four arithmetic operators and parentheses."""
    tokens: List[str]
    pos: int

    def __init__(self, text: str):
        self.tokens = []
        pos = 0
        text = text.rstrip()
        while pos < len(text):
            match = TOKEN_RE.match(text, pos)
            if not match:
                raise MemoryLayoutError(f"invalid expression: {text}")
            self.tokens.append(match.group("number") or match.group("op"))
            pos = match.end()
        self.pos = 0

    def parse(self) -> int:
        value = self._expression()
        if self.pos != len(self.tokens):
            raise MemoryLayoutError(f"unexpected token: {self.tokens[self.pos]}")
        return value

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise MemoryLayoutError("unexpected end of expression")
        self.pos += 1
        return token

    def _expression(self) -> int:
        value = self._term()
        while self._peek() in ("+", "-"):
            if self._next() == "+":
                value += self._term()
            else:
                value -= self._term()
        return value

    def _term(self) -> int:
        value = self._factor()
        while self._peek() in ("*", "/"):
            op = self._next()
            rhs = self._factor()
            if op == "*":
                value *= rhs
            elif rhs == 0:
                raise MemoryLayoutError("division by zero")
            else:
                value //= rhs
        return value

    def _factor(self) -> int:
        token = self._next()
        if token == "(":
            value = self._expression()
            if self._next() != ")":
                raise MemoryLayoutError("missing closing parenthesis")
            return value
        elif token == "-":
            return -self._factor()
        elif token in ("+", "*", "/", ")"):
            raise MemoryLayoutError(f"unexpected token: {token}")
        return parse_linker_number(token)


def evaluate_expression(text: str) -> int:
    try:
        return _ExpressionParser(text).parse()
    except RecursionError:
        raise MemoryLayoutError("expression is nested too deeply")


def parse_memory_regions(content: str) -> List[MemoryRegion]:
    """Parse the first MEMORY directive of a linker script and return its regions, in order.
    Raises MemoryLayoutError if there's no such directive or if it can't be parsed."""
    content = COMMENT_RE.sub(" ", content)
    directive = MEMORY_DIRECTIVE_RE.search(content)
    if not directive:
        raise MemoryLayoutError("no MEMORY directive")

    regions = []
    for line in directive.group("body").splitlines():
        line = line.strip()
        if not line:
            continue
        match = REGION_RE.match(line)
        if not match:
            raise MemoryLayoutError(f"invalid memory region: {line}")
        regions.append(MemoryRegion(name=match.group("name"),
                                    origin=evaluate_expression(match.group("origin")),
                                    length=evaluate_expression(match.group("length")),
                                    attributes=(match.group("attrs") or "").strip()))
    return regions


def memory_layout_from_regions(regions: Sequence[MemoryRegion]) -> Optional[MemoryLayout]:
    """Add up the length of all flash regions and of all RAM regions (case is ignored).
    Returns None unless both totals are positive."""
    flash = sum(r.length for r in regions if r.name.lower() == FLASH_REGION)
    ram = sum(r.length for r in regions if r.name.lower() == RAM_REGION)
    if flash > 0 and ram > 0:
        return MemoryLayout(flash, ram)
    return None


def read_memory_layout(path: PathLike) -> Optional[MemoryLayout]:
    """Read the memory layout file if present and return the flash and RAM capacity.
    If the file doesn't exist, has an invalid format or is missing either region, None is returned."""
    try:
        with open(path, "r", encoding="utf-8") as file:
            content = file.read()
    except (OSError, UnicodeDecodeError):
        return None

    try:
        regions = parse_memory_regions(content)
    except (MemoryLayoutError, ValueError):
        return None
    return memory_layout_from_regions(regions)
