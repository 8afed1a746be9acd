"""Tests for the library index and the per-entry JSON store."""

import json

import pytest

from animeshelf.exceptions import LibraryError
from animeshelf.models.library import LibraryEntry, MusicTrack, VideoRecord, VideoSection
from animeshelf.services.library import LibraryIndex
from animeshelf.services.store import EntryStore


@pytest.fixture
def entry():
    return LibraryEntry(
        title="葬送のフリーレン",
        root_path="/anime/Frieren",
        video_sections=[
            VideoSection(
                directory_key="",
                episodes=[
                    VideoRecord(
                        basename="ep01.mkv",
                        duration_seconds=1420.48,
                        size_bytes=734003200,
                        resolution="1920x1080",
                        audio_tracks=["[Japanese] FLAC, 2ch, 48kHz"],
                        subtitle_tracks=[".chs.ass"],
                        title="The Journey's End",
                    )
                ],
            )
        ],
        albums={"OST": [MusicTrack("Frieren", "Evan Call", 1, 180.0, "CD/OST.flac")]},
    )


class TestEntryStore:
    """Tests for EntryStore."""

    def test_save_and_load(self, tmp_path, entry):
        store = EntryStore(tmp_path / "entries")
        path = store.save(entry)

        assert path.exists()
        assert store.exists(entry.title)
        assert store.load(entry.title) == entry

    def test_saved_json_keeps_unicode(self, tmp_path, entry):
        path = EntryStore(tmp_path).save(entry)
        text = path.read_text(encoding="utf-8")
        assert "葬送のフリーレン" in text
        assert json.loads(text)["video_sections"][0]["episodes"][0]["title"] == "The Journey's End"

    def test_unset_overlays_are_omitted(self, tmp_path, entry):
        path = EntryStore(tmp_path).save(entry)
        episode = json.loads(path.read_text(encoding="utf-8"))["video_sections"][0]["episodes"][0]
        assert "airdate" not in episode
        assert "description" not in episode

    def test_missing_entry(self, tmp_path):
        assert EntryStore(tmp_path).load("Nothing") is None

    def test_corrupt_entry(self, tmp_path):
        store = EntryStore(tmp_path)
        store.path_for("Broken").write_text("{not json", encoding="utf-8")
        assert store.load("Broken") is None

    def test_path_is_sanitized(self, tmp_path):
        assert EntryStore(tmp_path).path_for("Re:Zero / S2").name == "Re_Zero _ S2.json"

    def test_delete(self, tmp_path, entry):
        store = EntryStore(tmp_path)
        store.save(entry)
        assert store.delete(entry.title) is True
        assert store.delete(entry.title) is False
        assert not store.exists(entry.title)

    def test_rename(self, tmp_path, entry):
        store = EntryStore(tmp_path)
        store.save(entry)
        old_title = entry.title
        entry.title = "Frieren"

        store.rename(old_title, entry)

        assert not store.exists(old_title)
        assert store.load("Frieren").title == "Frieren"


class TestLibraryIndex:
    """Tests for LibraryIndex."""

    def test_empty_when_missing(self, tmp_path):
        index = LibraryIndex(tmp_path / "library.json")
        assert len(index) == 0
        assert index.titles() == []

    def test_add_and_persist(self, tmp_path):
        index_file = tmp_path / "data" / "library.json"
        index = LibraryIndex(index_file)
        index.add("Frieren", "/anime/Frieren")
        index.add("Bocchi", "/anime/Bocchi")
        index.save()

        reloaded = LibraryIndex(index_file)
        assert reloaded.titles() == ["Frieren", "Bocchi"]
        assert reloaded.paths() == ["/anime/Frieren", "/anime/Bocchi"]
        assert reloaded.get_path("Bocchi") == "/anime/Bocchi"

    def test_duplicate_title(self, tmp_path):
        index = LibraryIndex(tmp_path / "library.json")
        index.add("Frieren", "/a")
        with pytest.raises(LibraryError):
            index.add("Frieren", "/b")

    def test_remove(self, tmp_path):
        index = LibraryIndex(tmp_path / "library.json")
        index.add("Frieren", "/a")
        index.remove("Frieren")
        assert not index.exists("Frieren")
        with pytest.raises(LibraryError):
            index.remove("Frieren")

    def test_rename(self, tmp_path):
        index = LibraryIndex(tmp_path / "library.json")
        index.add("Frieren", "/a")
        index.add("Bocchi", "/b")

        index.rename("Frieren", "Sousou no Frieren")
        assert index.titles() == ["Sousou no Frieren", "Bocchi"]

        with pytest.raises(LibraryError):
            index.rename("Bocchi", "Sousou no Frieren")
        with pytest.raises(LibraryError):
            index.rename("Missing", "Other")

    def test_move(self, tmp_path):
        index = LibraryIndex(tmp_path / "library.json")
        for title in ["A", "B", "C", "D"]:
            index.add(title, f"/{title}")

        index.move(0, 2)
        assert index.titles() == ["B", "C", "A", "D"]
        index.move(3, 0)
        assert index.titles() == ["D", "B", "C", "A"]

    def test_move_out_of_range(self, tmp_path):
        index = LibraryIndex(tmp_path / "library.json")
        index.add("A", "/a")
        with pytest.raises(LibraryError):
            index.move(0, 1)

    def test_sort(self, tmp_path):
        index = LibraryIndex(tmp_path / "library.json")
        for title in ["K-On", "Bocchi", "Frieren"]:
            index.add(title, f"/{title}")
        index.sort_by_title()
        assert index.titles() == ["Bocchi", "Frieren", "K-On"]

    def test_corrupt_index_starts_empty(self, tmp_path):
        index_file = tmp_path / "library.json"
        index_file.write_text("[{\"title\": 1}", encoding="utf-8")
        assert len(LibraryIndex(index_file)) == 0

    def test_titles_sharing_an_entry_file_are_rejected(self, tmp_path):
        """"Re:Zero" and "Re_Zero" would both save to Re_Zero.json."""
        index = LibraryIndex(tmp_path / "library.json")
        index.add("Re:Zero", "/a")

        with pytest.raises(LibraryError, match="saved entry file"):
            index.add("Re_Zero", "/b")
        assert index.titles() == ["Re:Zero"]

    def test_rename_into_shared_entry_file_is_rejected(self, tmp_path):
        index = LibraryIndex(tmp_path / "library.json")
        index.add("Re:Zero", "/a")
        index.add("Frieren", "/b")

        with pytest.raises(LibraryError):
            index.rename("Frieren", "Re?Zero")
        assert index.titles() == ["Re:Zero", "Frieren"]

    def test_rename_to_same_file_name_is_allowed(self, tmp_path):
        """An entry may be renamed to a title that maps to its own file."""
        index = LibraryIndex(tmp_path / "library.json")
        index.add("Re:Zero", "/a")
        index.rename("Re:Zero", "Re_Zero")
        assert index.titles() == ["Re_Zero"]
