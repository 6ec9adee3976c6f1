"""Per-action outcomes and the JUnit-style suite report."""

from __future__ import annotations

import sys
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Outcome:
    """Result of executing one action."""

    classname: str  # kind name as written in the playbook
    name: str  # action description
    time: float = 0.0
    success: bool = True
    error: str = ""
    error_type: str = ""


@dataclass
class Suite:
    """Ordered outcomes plus running aggregates."""

    name: str = "stdin"
    cases: list[Outcome] = field(default_factory=list)
    tests: int = 0
    failures: int = 0
    time: float = 0.0

    def add(self, outcome: Outcome) -> None:
        self.cases.append(outcome)
        self.tests += 1
        self.time += outcome.time
        if not outcome.success:
            self.failures += 1

    @property
    def passed(self) -> int:
        return self.tests - self.failures

    def to_element(self) -> ET.Element:
        suite = ET.Element("testsuite")
        suite.set("name", self.name)
        suite.set("tests", str(self.tests))
        suite.set("failures", str(self.failures))
        suite.set("disabled", "0")
        suite.set("time", f"{self.time:.3f}")

        for case in self.cases:
            testcase = ET.SubElement(suite, "testcase")
            testcase.set("classname", case.classname)
            testcase.set("name", case.name)
            testcase.set("time", f"{case.time:.3f}")
            if not case.success:
                failure = ET.SubElement(testcase, "failure")
                failure.set("message", case.error or "action failed")
                failure.set("type", case.error_type or "ActionFailed")
                failure.text = case.error
        return suite

    def to_xml(self) -> str:
        """Serialize as an XML document with declaration."""
        element = self.to_element()
        ET.indent(element)
        xml_string = ET.tostring(element, encoding="unicode")
        return f'<?xml version="1.0" encoding="UTF-8"?>\n{xml_string}\n'

    def write(self, path: str | Path) -> Path:
        path = Path(path)
        path.write_text(self.to_xml(), encoding="utf-8")
        return path

    def print_case(self, case: Outcome) -> None:
        status = "OK" if case.success else "FAIL"
        err_info = f" err={case.error}" if case.error else ""
        print(f"  [{status:4s}] {case.time:6.2f}s {case.name}{err_info}", file=sys.stderr)

    def print_report(self) -> None:
        print("\n" + "=" * 60, file=sys.stderr)
        print(f"  PLAYBOOK RESULTS: {self.name}", file=sys.stderr)
        print("=" * 60, file=sys.stderr)
        for case in self.cases:
            self.print_case(case)
        print("-" * 60, file=sys.stderr)
        print(f"  Passed: {self.passed}/{self.tests}", file=sys.stderr)
        print(f"  Failures: {self.failures}", file=sys.stderr)
        print(f"  Total time: {self.time:.2f}s", file=sys.stderr)
        print("=" * 60 + "\n", file=sys.stderr)
