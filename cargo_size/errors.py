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
from typing import Optional


class ErrorKind(Enum):
    """Reasons for program failure, with the message shown to the user."""
    NOT_A_CRATE = 0, "Not a cargo project, aborting."
    INVALID_MANIFEST = 1, "The manifest file Cargo.toml could not be parsed."
    BUILD_FAILED = 2, "The build failed."
    BINARY_NOT_FOUND = 3, "The binary could not be found in the target directory."
    INVALID_BINARY = 4, "The binary has an invalid format."
    IO_ERROR = 5, "An I/O error occurred."

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message


class SizeError(Exception):
    """Error raised by any step of the size pipeline. The step that failed is given by `kind`,
    an optional `detail` (a path, an underlying error) is appended to the message."""
    kind: ErrorKind

    def __init__(self, kind: ErrorKind, detail: Optional[str] = None):
        super().__init__(kind.message if detail is None else f"{kind.message[:-1]}: {detail}")
        self.kind = kind
