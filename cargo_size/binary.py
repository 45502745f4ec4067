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

from dataclasses import dataclass
from typing import Dict, Sequence

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from cargo_size.errors import ErrorKind, SizeError
from cargo_size.utils import PathLike

# Sections holding program code. Their sizes are added up to get the program size.
CODE_SECTIONS = (".vector_table", ".text", ".rodata")

# Sections holding program data. Their sizes are added up to get the data size.
DATA_SECTIONS = (".bss", ".data")


@dataclass(frozen=True)
class SectionSizes:
    """Code and data size of a binary, in bytes."""
    code: int
    data: int


def _find_sections(elf: ELFFile, names: Sequence[str], found: Dict[str, int]) -> None:
    for name in names:
        section = elf.get_section_by_name(name)
        if section is not None:
            found[name] = section["sh_size"]


def read_section_sizes(path: PathLike,
                       code_sections: Sequence[str] = CODE_SECTIONS,
                       data_sections: Sequence[str] = DATA_SECTIONS) -> Dict[str, int]:
    """Returns the size of each of the listed sections present in the binary, by name.
    Raises a SizeError if the file can't be read or isn't a valid ELF file."""
    found = {}
    try:
        with open(path, "rb") as file:
            elf = ELFFile(file)
            _find_sections(elf, code_sections, found)
            _find_sections(elf, data_sections, found)
    except ELFError as e:
        raise SizeError(ErrorKind.INVALID_BINARY, str(e))
    except OSError as e:
        raise SizeError(ErrorKind.IO_ERROR, str(e))
    return found


def sum_section_sizes(found: Dict[str, int],
                      code_sections: Sequence[str] = CODE_SECTIONS,
                      data_sections: Sequence[str] = DATA_SECTIONS) -> SectionSizes:
    code = sum(found.get(name, 0) for name in code_sections)
    data = sum(found.get(name, 0) for name in data_sections)
    return SectionSizes(code, data)


def read_sizes(path: PathLike,
               code_sections: Sequence[str] = CODE_SECTIONS,
               data_sections: Sequence[str] = DATA_SECTIONS) -> SectionSizes:
    """Read the code and data size from the binary.
    The sizes of the sections listed in `code_sections` and `data_sections` are added up.
    Sections missing from the binary are ignored, as are sections not listed."""
    found = read_section_sizes(path, code_sections, data_sections)
    return sum_section_sizes(found, code_sections, data_sections)
