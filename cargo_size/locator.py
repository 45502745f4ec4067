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

# When cross-compiling, cargo nests the build output one level deeper, in a directory named
# after the target triple: target/<triple>/<mode>/<name> instead of target/<mode>/<name>.
# The native layout is always checked first, then the known triples in order.

from pathlib import Path
from typing import Iterator, Sequence

from cargo_size.errors import ErrorKind, SizeError
from cargo_size.mode import BuildMode
from cargo_size.utils import PathLike

TARGET_DIR = "target"

# known cross-compilation targets, in search order.
CROSS_TARGETS = (
    "thumbv6m-none-eabi",
    "thumbv7m-none-eabi",
    "thumbv7em-none-eabi",
    "thumbv7em-none-eabihf",
    "thumbv8m.base-none-eabi",
    "thumbv8m.main-none-eabi",
    "thumbv8m.main-none-eabihf",
    "riscv32i-unknown-none-elf",
    "riscv32imc-unknown-none-elf",
    "riscv32imac-unknown-none-elf",
)


def candidate_paths(project_root: PathLike, artifact_name: str, mode: BuildMode,
                    targets: Sequence[str] = CROSS_TARGETS) -> Iterator[Path]:
    """Yield the possible locations of the binary, most preferred first.
    Only target triples which have a directory in the target directory are yielded."""
    target_dir = Path(project_root) / TARGET_DIR
    yield target_dir / mode.dirname / artifact_name
    for triple in targets:
        triple_dir = target_dir / triple
        if triple_dir.is_dir():
            yield triple_dir / mode.dirname / artifact_name


def locate_binary(project_root: PathLike, artifact_name: str, mode: BuildMode,
                  targets: Sequence[str] = CROSS_TARGETS) -> Path:
    """Returns the path of the binary built for `mode`. Raises a SizeError if it doesn't exist
    in the native layout nor in the layout of any of the `targets`."""
    if not artifact_name:
        raise SizeError(ErrorKind.BINARY_NOT_FOUND, "no binary name")
    for path in candidate_paths(project_root, artifact_name, mode, targets):
        if path.is_file():
            return path
    raise SizeError(ErrorKind.BINARY_NOT_FOUND, artifact_name)
