"""Tests for JaCoCo XML coverage parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from jvmtest.testing.coverage import CoverageParseError
from jvmtest.testing.jacoco import JacocoParser, module_root_for

JACOCO_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<!DOCTYPE report PUBLIC "-//JACOCO//DTD Report 1.1//EN" "report.dtd">
<report name="demo">
  <package name="pkg">
    <class name="pkg/Calc" sourcefilename="Calc.groovy"/>
    <sourcefile name="Calc.groovy">
      <line nr="3" mi="0" ci="4" mb="0" cb="0"/>
      <line nr="5" mi="2" ci="1" mb="1" cb="1"/>
      <line nr="8" mi="3" ci="0" mb="0" cb="0"/>
      <counter type="LINE" missed="1" covered="2"/>
      <counter type="BRANCH" missed="1" covered="1"/>
    </sourcefile>
    <sourcefile name="Generated.groovy">
      <line nr="1" mi="0" ci="1" mb="0" cb="0"/>
    </sourcefile>
  </package>
</report>
"""


@pytest.fixture
def maven_module(tmp_path: Path) -> Path:
    """Maven module with one source file and a jacoco.xml report."""
    source = tmp_path / "src" / "main" / "groovy" / "pkg"
    source.mkdir(parents=True)
    (source / "Calc.groovy").write_text("class Calc {}\n")
    report_dir = tmp_path / "target" / "site" / "jacoco"
    report_dir.mkdir(parents=True)
    (report_dir / "jacoco.xml").write_text(JACOCO_XML)
    return tmp_path


class TestModuleRoot:
    def test_maven_report(self, tmp_path: Path) -> None:
        report = tmp_path / "core" / "target" / "site" / "jacoco" / "jacoco.xml"

        assert module_root_for(report) == tmp_path / "core"

    def test_gradle_report(self, tmp_path: Path) -> None:
        report = tmp_path / "build" / "reports" / "jacoco" / "test" / "jacocoTestReport.xml"

        assert module_root_for(report) == tmp_path


class TestCanParse:
    def test_module_target_dir(self, maven_module: Path) -> None:
        assert JacocoParser().can_parse(maven_module / "target")

    def test_content_sniff(self, maven_module: Path) -> None:
        assert JacocoParser().can_parse(maven_module / "target" / "site" / "jacoco" / "jacoco.xml")

    def test_other_xml(self, tmp_path: Path) -> None:
        other = tmp_path / "pom.xml"
        other.write_text("<project/>")

        assert not JacocoParser().can_parse(other)


class TestParse:
    """Sourcefile → CoverageFile conversion."""

    def test_resolves_sources_and_lines(self, maven_module: Path) -> None:
        # When
        files = JacocoParser().parse(maven_module / "target" / "site" / "jacoco" / "jacoco.xml")

        # Then
        assert len(files) == 1
        calc = files[0]
        expected = (maven_module / "src/main/groovy/pkg/Calc.groovy").resolve()
        assert calc.uri == expected.as_uri()
        assert [(ln.line, ln.covered) for ln in calc.lines] == [(3, True), (5, True), (8, False)]
        assert calc.lines[0].branch_info is None
        assert calc.lines[1].branch_info is not None
        assert calc.lines[1].branch_info.total == 2

    def test_summary_from_counters(self, maven_module: Path) -> None:
        files = JacocoParser().parse(maven_module / "target")

        summary = files[0].summary
        assert (summary.lines_covered, summary.lines_total) == (2, 3)
        assert (summary.branches_covered, summary.branches_total) == (1, 2)

    def test_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CoverageParseError):
            JacocoParser().parse(tmp_path / "nope.xml")

    def test_invalid_xml_raises(self, tmp_path: Path) -> None:
        report = tmp_path / "jacoco.xml"
        report.write_text("<report><package")

        with pytest.raises(CoverageParseError):
            JacocoParser().parse(report)

    def test_non_numeric_counter_raises(self, maven_module: Path) -> None:
        # Given
        report = maven_module / "target" / "site" / "jacoco" / "jacoco.xml"
        report.write_text(JACOCO_XML.replace('nr="3"', 'nr=""'))

        # When / Then
        with pytest.raises(CoverageParseError, match="pkg/Calc.groovy"):
            JacocoParser().parse(report)

        assert JacocoParser().parse_many([report]).files == []


class TestParseMany:
    def test_merges_reports_and_skips_broken(self, maven_module: Path, tmp_path: Path) -> None:
        # Given
        broken = tmp_path / "broken" / "jacoco.xml"
        broken.parent.mkdir()
        broken.write_text("not xml")
        good = maven_module / "target" / "site" / "jacoco" / "jacoco.xml"

        # When
        response = JacocoParser().parse_many([good, broken, good])

        # Then
        assert len(response.files) == 1
        assert response.summary.lines_total == 3
        assert response.summary.line_coverage_percent == pytest.approx(200 / 3)
