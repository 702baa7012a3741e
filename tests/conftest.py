"""Shared fixtures: a small MusicXML lead sheet with flat-rooted chord symbols."""

from pathlib import Path

import pytest

# Bb7 over a B4 whole note, then Eb/Bb over an E4 whole note.
FLAT_LEAD_SHEET_XML = """<?xml version="1.0" encoding="UTF-8"?>
<score-partwise version="3.1">
  <part-list>
    <score-part id="P1"><part-name>Melody</part-name></score-part>
  </part-list>
  <part id="P1">
    <measure number="1">
      <attributes>
        <divisions>1</divisions>
        <time><beats>4</beats><beat-type>4</beat-type></time>
      </attributes>
      <harmony>
        <root><root-step>B</root-step><root-alter>-1</root-alter></root>
        <kind>dominant</kind>
      </harmony>
      <note>
        <pitch><step>B</step><octave>4</octave></pitch>
        <duration>4</duration>
        <type>whole</type>
      </note>
    </measure>
    <measure number="2">
      <harmony>
        <root><root-step>E</root-step><root-alter>-1</root-alter></root>
        <kind>major</kind>
        <bass><bass-step>B</bass-step><bass-alter>-1</bass-alter></bass>
      </harmony>
      <note>
        <pitch><step>E</step><octave>4</octave></pitch>
        <duration>4</duration>
        <type>whole</type>
      </note>
    </measure>
  </part>
</score-partwise>
"""


@pytest.fixture
def flat_lead_sheet(tmp_path: Path) -> Path:
    path = tmp_path / "lead_sheet.musicxml"
    path.write_text(FLAT_LEAD_SHEET_XML, encoding="utf-8")
    return path
