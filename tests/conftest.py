import struct
from pathlib import Path
from typing import Callable, Dict

import pytest

SHT_PROGBITS = 1
SHT_STRTAB = 3
SHT_NOBITS = 8
SHF_ALLOC = 2

EM_ARM = 40
EM_RISCV = 243

MEMORY_X = """\
MEMORY
{
  /* NOTE 1 K = 1 KiBi = 1024 bytes */
  FLASH : ORIGIN = 0x08000000, LENGTH = 256K
  RAM : ORIGIN = 0x20000000, LENGTH = 64K
}

/* This is where the call stack will be allocated. */
_stack_start = ORIGIN(RAM) + LENGTH(RAM);
"""


def build_elf(sections: Dict[str, int], elf_class: int = 32) -> bytes:
    """Build a minimal little-endian executable with a section table and no section data.
    `sections` maps section names to their declared size."""
    names = list(sections.keys()) + [".shstrtab"]
    strtab = bytearray(b"\0")
    name_offsets = {}
    for name in names:
        name_offsets[name] = len(strtab)
        strtab += name.encode() + b"\0"

    if elf_class == 32:
        header_size, sh_size, sh_format = 52, 40, "<IIIIIIIIII"
    else:
        header_size, sh_size, sh_format = 64, 64, "<IIQQQQIIQQ"
    strtab_offset = header_size
    sh_offset = (strtab_offset + len(strtab) + 7) & ~7

    headers = [bytes(sh_size)]
    for name, size in sections.items():
        sh_type = SHT_NOBITS if name == ".bss" else SHT_PROGBITS
        headers.append(struct.pack(sh_format, name_offsets[name], sh_type, SHF_ALLOC,
                                   0, strtab_offset, size, 0, 0, 1, 0))
    headers.append(struct.pack(sh_format, name_offsets[".shstrtab"], SHT_STRTAB, 0,
                               0, strtab_offset, len(strtab), 0, 0, 1, 0))

    e_ident = b"\x7fELF" + bytes([1 if elf_class == 32 else 2, 1, 1, 0]) + bytes(8)
    if elf_class == 32:
        header = e_ident + struct.pack("<HHIIIIIHHHHHH", 2, EM_ARM, 1, 0, 0, sh_offset, 0,
                                       header_size, 0, 0, sh_size, len(headers), len(headers) - 1)
    else:
        header = e_ident + struct.pack("<HHIQQQIHHHHHH", 2, EM_RISCV, 1, 0, 0, sh_offset, 0,
                                       header_size, 0, 0, sh_size, len(headers), len(headers) - 1)

    data = bytearray(header)
    data += strtab
    data += bytes(sh_offset - len(data))
    for h in headers:
        data += h
    return bytes(data)


@pytest.fixture
def make_elf(tmp_path: Path) -> Callable[..., Path]:
    """Returns a function writing an ELF file with the given sections, returning its path."""
    def factory(sections: Dict[str, int], path: Path = None, elf_class: int = 32) -> Path:
        if path is None:
            path = tmp_path / "firmware"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_elf(sections, elf_class))
        return path

    return factory


@pytest.fixture
def crate(tmp_path: Path) -> Path:
    """An empty crate named `myapp`."""
    root = tmp_path / "myapp"
    root.mkdir()
    (root / "Cargo.toml").write_text('[package]\nname = "myapp"\nversion = "0.1.0"\n')
    (root / "src").mkdir()
    return root
