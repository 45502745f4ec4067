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
from typing import Optional

from cargo_size.binary import SectionSizes
from cargo_size.memory import MemoryLayout


@dataclass(frozen=True)
class UsageReport:
    """Memory usage of a binary. Percentages are only known if the memory layout is."""
    code_bytes: int
    data_bytes: int
    code_percentage: Optional[float] = None
    data_percentage: Optional[float] = None

    @property
    def has_percentages(self) -> bool:
        return self.code_percentage is not None and self.data_percentage is not None


def build_report(sizes: SectionSizes, layout: Optional[MemoryLayout]) -> UsageReport:
    if layout is None:
        return UsageReport(sizes.code, sizes.data)
    return UsageReport(sizes.code, sizes.data,
                       code_percentage=sizes.code / layout.flash * 100,
                       data_percentage=sizes.data / layout.ram * 100)


def format_report(report: UsageReport) -> str:
    """Format the report as lines of text, similar to:

        Memory Usage
        ------------
        Program:    1200 bytes (0.5% full)
        Data:          8 bytes (0.0% full)
    """
    def usage_line(name: str, usage: int, percentage: Optional[float]) -> str:
        line = f"{name + ':':<8} {usage:>7} bytes"
        if report.has_percentages:
            line += f" ({percentage:.1f}% full)"
        return line

    lines = [
        "Memory Usage",
        "------------",
        usage_line("Program", report.code_bytes, report.code_percentage),
        usage_line("Data", report.data_bytes, report.data_percentage),
    ]
    return "\n".join(lines)
