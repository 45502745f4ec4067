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

from enum import Enum
from typing import Tuple


class BuildMode(Enum):
    """Cargo build profile. The value is the name of the output directory in `target`."""
    DEBUG = "debug", ()
    RELEASE = "release", ("--release",)

    def __init__(self, dirname: str, build_args: Tuple[str, ...]):
        self.dirname = dirname
        self.build_args = build_args

    @staticmethod
    def from_release_flag(release: bool) -> "BuildMode":
        return BuildMode.RELEASE if release else BuildMode.DEBUG
