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

# Cargo subcommand printing the memory usage of a crate binary.
# The binary is built first if needed. If a `memory.x` file is found in the crate root,
# the flash and RAM capacities it declares are used to print the percentage of used memory.
#
# Usage:
#
#   $ cargo size [--release]
#      Printing Memory Usage
#               ------------
#               Program:   55652 bytes (42.5% full)
#               Data:          8 bytes (0.0% full)
#
# Errors (not a cargo project, build failure, binary not found or invalid) are printed
# to stderr and the program exits with status code 1.

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO

import colorama

from cargo_size import __version__, binary, cargo, locator, memory
from cargo_size.errors import SizeError
from cargo_size.mode import BuildMode
from cargo_size.report import UsageReport, build_report, format_report
from cargo_size.utils import readable_capacity

PROGRAM_NAME = "cargo-size"
SUBCOMMAND_NAME = "size"
MEMORY_FILE = "memory.x"

# width of the status word printed before the output, as cargo does.
STATUS_WIDTH = 12

parser = argparse.ArgumentParser(
    prog="cargo size", description="A command extending cargo to print the memory usage of a program")
parser.add_argument(
    "--release", action="store_true", dest="release",
    help="Print the size of the release binary (debug if flag is not present)")
parser.add_argument(
    "--target", action="store", type=str, dest="target", default=None,
    help="Build for the target triple and look for the binary in its directory first")
parser.add_argument(
    "--bin", action="store", type=str, dest="bin_name", default=None,
    help="Name of the binary (default is the package name)")
parser.add_argument(
    "--memory", action="store", type=str, dest="memory_file", default=None,
    help=f"Memory layout file (default is {MEMORY_FILE} in the crate root)")
parser.add_argument(
    "--no-build", action="store_false", dest="build",
    help="Don't build the binary, use the one already in the target directory")
parser.add_argument(
    "--verbose", action="store_true", dest="verbose",
    help="Print the files used and the size of each section")
parser.add_argument(
    "-v", "--version", action="store_true", dest="version",
    help="Print the version number and exit")


@dataclass
class Config:
    start_dir: Path
    mode: BuildMode
    target: Optional[str]
    bin_name: Optional[str]
    memory_file: Optional[Path]
    build: bool
    verbose: bool

    @staticmethod
    def from_args(args: argparse.Namespace, start_dir: Path) -> "Config":
        return Config(start_dir=start_dir,
                      mode=BuildMode.from_release_flag(args.release),
                      target=args.target,
                      bin_name=args.bin_name,
                      memory_file=Path(args.memory_file) if args.memory_file else None,
                      build=args.build,
                      verbose=args.verbose)


def print_info(text: str) -> None:
    print(colorama.Fore.LIGHTBLACK_EX + text + colorama.Style.RESET_ALL)


def print_status(status: str, color: str, text: str, file: Optional[TextIO] = None) -> None:
    """Print text with a colored status word in front, continuation lines are aligned."""
    text = text.replace("\n", "\n" + " " * (STATUS_WIDTH + 1))
    print(f"{color}{colorama.Style.BRIGHT}{status:>{STATUS_WIDTH}}{colorama.Style.RESET_ALL} {text}",
          file=file or sys.stdout)


def run(config: Config) -> UsageReport:
    """Execute the whole pipeline, stopping at the first error."""
    root = cargo.find_root(config.start_dir)
    name = config.bin_name or cargo.crate_name(root)
    if config.verbose:
        print_info(f"crate root: {root}")

    if config.build:
        cargo.build_binary(root, config.mode, config.target)

    targets = locator.CROSS_TARGETS
    if config.target:
        targets = (config.target, *targets)
    path = locator.locate_binary(root, name, config.mode, targets)

    sections = binary.read_section_sizes(path)
    sizes = binary.sum_section_sizes(sections)
    if config.verbose:
        print_info(f"binary: {path}")
        for section, size in sections.items():
            print_info(f"  {section:<14} {size:>7} B")

    memory_file = config.memory_file or root / MEMORY_FILE
    layout = memory.read_memory_layout(memory_file)
    if config.verbose:
        if layout:
            print_info(f"memory layout: {memory_file} (flash {readable_capacity(layout.flash)}, "
                       f"RAM {readable_capacity(layout.ram)})")
        else:
            print_info(f"memory layout: {memory_file} not found or invalid")

    return build_report(sizes, layout)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    # cargo passes the subcommand name as the first argument.
    if argv and argv[0] == SUBCOMMAND_NAME:
        argv = argv[1:]
    args = parser.parse_args(argv)

    if args.version:
        print(f"{PROGRAM_NAME} {__version__}")
        return 0

    colorama.init()
    try:
        report = run(Config.from_args(args, Path.cwd()))
    except SizeError as e:
        print_status("Error", colorama.Fore.LIGHTRED_EX, str(e), file=sys.stderr)
        return 1

    print_status("Printing", colorama.Fore.LIGHTGREEN_EX, format_report(report))
    return 0


if __name__ == '__main__':
    sys.exit(main())
