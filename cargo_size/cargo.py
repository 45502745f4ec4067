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

import subprocess
import tomllib
from pathlib import Path
from typing import Optional

from cargo_size.errors import ErrorKind, SizeError
from cargo_size.mode import BuildMode
from cargo_size.utils import PathLike

MANIFEST_NAME = "Cargo.toml"


def contains_manifest(directory: Path) -> bool:
    """Query if `directory` contains a manifest file. Returns False on an I/O error."""
    try:
        return (directory / MANIFEST_NAME).is_file()
    except OSError:
        return False


def find_root(start: PathLike) -> Path:
    """Returns the crate root: `start` or the first of its parents containing a manifest."""
    start = Path(start).resolve()
    for directory in (start, *start.parents):
        if contains_manifest(directory):
            return directory
    raise SizeError(ErrorKind.NOT_A_CRATE)


def crate_name(root: PathLike) -> str:
    """Returns the package name declared in the crate manifest."""
    manifest = Path(root) / MANIFEST_NAME
    try:
        with open(manifest, "rb") as file:
            content = tomllib.load(file)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise SizeError(ErrorKind.INVALID_MANIFEST, str(e))

    package = content.get("package")
    name = package.get("name") if isinstance(package, dict) else None
    if not isinstance(name, str) or not name:
        raise SizeError(ErrorKind.INVALID_MANIFEST, "package name is missing")
    return name


def build_binary(root: PathLike, mode: BuildMode, target: Optional[str] = None) -> None:
    """Build the crate binary with cargo, in the crate root. Cargo output is not captured."""
    cmd = ["cargo", "build", *mode.build_args]
    if target:
        cmd.extend(["--target", target])
    try:
        result = subprocess.run(cmd, cwd=root, check=False)
    except OSError as e:
        raise SizeError(ErrorKind.IO_ERROR, f"could not run cargo ({e})")
    if result.returncode != 0:
        raise SizeError(ErrorKind.BUILD_FAILED, f"cargo exited with code {result.returncode}")
