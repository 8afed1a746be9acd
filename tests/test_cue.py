"""Tests for cue sheet parsing and segmentation."""

import pytest

from animeshelf.exceptions import CueParseError
from animeshelf.extractors.cuesheet import CueParser, decode_cue_bytes, parse_cue_text
from animeshelf.models.inspection import DiagnosticKind
from animeshelf.models.media import AudioTags, CueFile, CueIndex, CueSheet, CueTrack
from animeshelf.processors.cue import (
    CueSegmenter,
    CueTrackEntry,
    build_track_entries,
    segment_durations,
)

from conftest import FakeCueParser, FakeTagReader

ROOT = "/anime/Bocchi"

SAMPLE_CUE = """\
REM GENRE Soundtrack
REM DATE 2022
PERFORMER "kessoku band"
TITLE "Kessoku Band"
FILE "Kessoku Band.flac" WAVE
  TRACK 01 AUDIO
    TITLE "Seishun Complex"
    INDEX 01 00:00:00
  TRACK 02 AUDIO
    TITLE "Hitoribocchi Tokyo"
    PERFORMER "Ikuyo Kita"
    INDEX 00 03:20:50
    INDEX 01 03:22:00
  TRACK 03 AUDIO
    TITLE "Distortion!!"
    FLAGS DCP
    INDEX 01 07:10:37
"""


def track(number, index_one, index_zero=None, title=None):
    indexes = []
    if index_zero is not None:
        indexes.append(CueIndex(0, *index_zero))
    indexes.append(CueIndex(1, *index_one))
    return CueTrack(number=number, title=title or f"Song {number}", performer="Artist", indexes=indexes)


class TestParseCueText:
    """Tests for parse_cue_text()."""

    def test_sheet_fields(self):
        sheet = parse_cue_text(SAMPLE_CUE)
        assert sheet.title == "Kessoku Band"
        assert sheet.performer == "kessoku band"
        assert [f.name for f in sheet.files] == ["Kessoku Band.flac"]

    def test_tracks(self):
        tracks = parse_cue_text(SAMPLE_CUE).files[0].tracks
        assert [t.number for t in tracks] == [1, 2, 3]
        assert [t.title for t in tracks] == ["Seishun Complex", "Hitoribocchi Tokyo", "Distortion!!"]

    def test_track_performer_falls_back_to_sheet(self):
        tracks = parse_cue_text(SAMPLE_CUE).files[0].tracks
        assert [t.performer for t in tracks] == ["kessoku band", "Ikuyo Kita", "kessoku band"]

    def test_indexes(self):
        second = parse_cue_text(SAMPLE_CUE).files[0].tracks[1]
        assert second.indexes == [CueIndex(0, 3, 20, 50), CueIndex(1, 3, 22, 0)]

    def test_index_seconds_use_75_frames(self):
        assert CueIndex(1, 3, 0, 0).total_seconds == 180.0
        assert CueIndex(1, 6, 5, 30).total_seconds == pytest.approx(365.4)

    def test_multiple_files(self):
        text = (
            'TITLE "Disc"\n'
            'FILE "01.wav" WAVE\n  TRACK 01 AUDIO\n    INDEX 01 00:00:00\n'
            'FILE "02.wav" WAVE\n  TRACK 02 AUDIO\n    INDEX 01 00:00:00\n'
        )
        sheet = parse_cue_text(text)
        assert [f.name for f in sheet.files] == ["01.wav", "02.wav"]
        assert [t.number for t in sheet.files[1].tracks] == [2]

    def test_unquoted_file_name(self):
        sheet = parse_cue_text("FILE album.flac WAVE\n  TRACK 01 AUDIO\n    INDEX 01 00:00:00\n")
        assert sheet.files[0].name == "album.flac"

    def test_track_before_file_is_rejected(self):
        with pytest.raises(CueParseError):
            parse_cue_text("TRACK 01 AUDIO\n  INDEX 01 00:00:00\n")

    def test_malformed_index_is_rejected(self):
        with pytest.raises(CueParseError):
            parse_cue_text('FILE "a.flac" WAVE\n  TRACK 01 AUDIO\n    INDEX 01 0:0\n')


class TestCueParser:
    """Tests for reading cue files from disk."""

    def test_reads_utf8_with_bom(self, tmp_path):
        cue = tmp_path / "album.cue"
        cue.write_bytes(b"\xef\xbb\xbf" + SAMPLE_CUE.encode("utf-8"))
        assert CueParser().parse(str(cue)).title == "Kessoku Band"

    def test_reads_shift_jis(self, tmp_path):
        text = (
            'PERFORMER "結束バンド"\n'
            'TITLE "結束バンド"\n'
            'FILE "結束バンド.flac" WAVE\n'
            '  TRACK 01 AUDIO\n    TITLE "青春コンプレックス"\n    INDEX 01 00:00:00\n'
            '  TRACK 02 AUDIO\n    TITLE "ひとりぼっち東京"\n    INDEX 01 03:22:00\n'
            '  TRACK 03 AUDIO\n    TITLE "ギターと孤独と蒼い惑星"\n    INDEX 01 07:10:37\n'
            '  TRACK 04 AUDIO\n    TITLE "あのバンド"\n    INDEX 01 11:02:00\n'
            '  TRACK 05 AUDIO\n    TITLE "カラカラ"\n    INDEX 01 14:40:00\n'
        )
        cue = tmp_path / "album.cue"
        cue.write_bytes(text.encode("shift_jis"))

        sheet = CueParser().parse(str(cue))
        assert sheet.title == "結束バンド"
        assert sheet.files[0].tracks[0].title == "青春コンプレックス"

    def test_missing_file(self, tmp_path):
        with pytest.raises(CueParseError):
            CueParser().parse(str(tmp_path / "nope.cue"))

    def test_decode_plain_utf8(self):
        assert decode_cue_bytes('TITLE "Ä"'.encode("utf-8")) == 'TITLE "Ä"'


class TestSegmentDurations:
    """Tests for build_track_entries() and segment_durations()."""

    def test_durations_from_index01(self):
        entries = [
            CueTrackEntry(1, "a", None, index_one_seconds=0.0),
            CueTrackEntry(2, "b", None, index_one_seconds=180.0),
            CueTrackEntry(3, "c", None, index_one_seconds=365.5),
        ]
        durations = segment_durations(entries, 540.0)
        assert durations == [180.0, 185.5, 174.5]
        assert sum(durations) == pytest.approx(540.0, abs=0.01)

    def test_next_pregap_ends_track(self):
        entries = [
            CueTrackEntry(1, "a", None, index_one_seconds=0.0),
            CueTrackEntry(2, "b", None, index_one_seconds=202.0, index_zero_seconds=200.0),
        ]
        assert segment_durations(entries, 400.0) == [200.0, 198.0]

    def test_pregap_at_zero_still_counts(self):
        entries = [
            CueTrackEntry(1, "a", None, index_one_seconds=0.0),
            CueTrackEntry(2, "b", None, index_one_seconds=2.0, index_zero_seconds=0.0),
        ]
        assert segment_durations(entries, 10.0) == [0.0, 8.0]

    def test_rounding(self):
        entries = [
            CueTrackEntry(1, "a", None, index_one_seconds=0.0),
            CueTrackEntry(2, "b", None, index_one_seconds=CueIndex(1, 3, 22, 1).total_seconds),
        ]
        assert segment_durations(entries, 300.0) == [202.01, 97.99]

    def test_entries_sorted_by_track_number(self):
        cue_file = CueFile(name="a.flac", tracks=[track(2, (3, 0, 0)), track(1, (0, 0, 0))])
        entries = build_track_entries(cue_file)
        assert [e.track_number for e in entries] == [1, 2]
        assert entries[1].index_one_seconds == 180.0
        assert entries[1].index_zero_seconds is None

    def test_track_without_index01(self):
        cue_file = CueFile(name="a.flac", tracks=[CueTrack(number=1, indexes=[CueIndex(0, 0, 0, 0)])])
        with pytest.raises(CueParseError):
            build_track_entries(cue_file)


class TestCueSegmenter:
    """Tests for CueSegmenter against fake collaborators."""

    @pytest.fixture
    def sheet(self):
        return CueSheet(
            title="Kessoku Band",
            files=[
                CueFile(
                    name="Kessoku Band.flac",
                    tracks=[track(3, (6, 5, 0)), track(1, (0, 0, 0)), track(2, (3, 0, 0))],
                )
            ],
        )

    def test_tracks_emitted_in_number_order(self, sheet):
        cue_path = f"{ROOT}/CD/album.cue"
        audio = f"{ROOT}/CD/Kessoku Band.flac"
        tags = FakeTagReader(tags={audio: AudioTags(duration_seconds=540.0)})
        segmenter = CueSegmenter(FakeCueParser({cue_path: sheet}), tags, show_progress=False)

        result = segmenter.segment([cue_path], [audio, f"{ROOT}/CD/bonus.flac"], ROOT)

        tracks = result.albums["Kessoku Band"]
        assert [t.track_number for t in tracks] == [1, 2, 3]
        assert [t.duration_seconds for t in tracks] == [180.0, 185.0, 175.0]
        assert {t.source for t in tracks} == {"CD/Kessoku Band.flac"}
        assert result.remaining_pool == [f"{ROOT}/CD/bonus.flac"]
        assert result.diagnostics == []

    def test_missing_referenced_file(self, sheet):
        cue_path = f"{ROOT}/CD/album.cue"
        segmenter = CueSegmenter(FakeCueParser({cue_path: sheet}), FakeTagReader(), show_progress=False)

        result = segmenter.segment([cue_path], [f"{ROOT}/CD/other.flac"], ROOT)

        assert result.albums == {}
        assert result.remaining_pool == [f"{ROOT}/CD/other.flac"]
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.RESOLUTION_FAILURE]

    def test_unreadable_duration_skips_only_that_file(self):
        cue_path = f"{ROOT}/album.cue"
        sheet = CueSheet(
            title="Disc",
            files=[
                CueFile(name="a.wav", tracks=[track(1, (0, 0, 0))]),
                CueFile(name="b.wav", tracks=[track(2, (0, 0, 0))]),
            ],
        )
        tags = FakeTagReader(
            tags={f"{ROOT}/b.wav": AudioTags(duration_seconds=99.5)},
            failures={f"{ROOT}/a.wav"},
        )
        segmenter = CueSegmenter(FakeCueParser({cue_path: sheet}), tags, show_progress=False)

        result = segmenter.segment([cue_path], [f"{ROOT}/a.wav", f"{ROOT}/b.wav"], ROOT)

        assert [t.track_number for t in result.albums["Disc"]] == [2]
        assert result.albums["Disc"][0].duration_seconds == 99.5
        # Both files were consumed by the sheet, even the unreadable one
        assert result.remaining_pool == []
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.PROBE_FAILURE]

    def test_zero_tracks_creates_no_album(self):
        cue_path = f"{ROOT}/empty.cue"
        sheet = CueSheet(title="Empty", files=[CueFile(name="a.flac")])
        segmenter = CueSegmenter(FakeCueParser({cue_path: sheet}), FakeTagReader(), show_progress=False)

        result = segmenter.segment([cue_path], [f"{ROOT}/a.flac"], ROOT)

        assert result.albums == {}
        assert result.diagnostics == []
        # The referenced file is still claimed from the pool
        assert result.remaining_pool == []

    def test_sheets_sharing_album_name_merge_in_sheet_order(self):
        first, second = f"{ROOT}/CD1/disc.cue", f"{ROOT}/CD2/disc.cue"
        parser = FakeCueParser(
            {
                first: CueSheet(title="OST", files=[CueFile(name="disc.flac", tracks=[track(1, (0, 0, 0), title="A")])]),
                second: CueSheet(title="OST", files=[CueFile(name="disc.flac", tracks=[track(1, (0, 0, 0), title="B")])]),
            }
        )
        segmenter = CueSegmenter(parser, FakeTagReader(), show_progress=False)

        result = segmenter.segment([first, second], [f"{ROOT}/CD1/disc.flac", f"{ROOT}/CD2/disc.flac"], ROOT)

        assert [t.title for t in result.albums["OST"]] == ["A", "B"]

    def test_unparseable_sheet_is_skipped(self):
        segmenter = CueSegmenter(FakeCueParser(), FakeTagReader(), show_progress=False)
        result = segmenter.segment([f"{ROOT}/broken.cue"], [f"{ROOT}/a.flac"], ROOT)

        assert result.albums == {}
        assert result.remaining_pool == [f"{ROOT}/a.flac"]
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.CUE_PARSE_FAILURE]

    def test_untitled_sheet_uses_cue_stem(self):
        cue_path = f"{ROOT}/Character Songs.cue"
        sheet = CueSheet(files=[CueFile(name="a.flac", tracks=[track(1, (0, 0, 0))])])
        segmenter = CueSegmenter(FakeCueParser({cue_path: sheet}), FakeTagReader(), show_progress=False)

        result = segmenter.segment([cue_path], [f"{ROOT}/a.flac"], ROOT)

        assert list(result.albums) == ["Character Songs"]
