"""
Unit tests for VocabularyLoader (CSV import).
"""

import pytest

from vocabstudy.content.loader import ImportReport, VocabularyLoader
from vocabstudy.store.memory import InMemoryProgressStore

HEADER = "infinitive,part_of_speech,known_lang,learning_lang,hint,user_notes,alternates\n"


@pytest.fixture
def loader():
    return VocabularyLoader(InMemoryProgressStore())


def _write(path, body, header=HEADER, encoding="utf-8"):
    path.write_text(header + body, encoding=encoding)
    return path


class TestImportFile:
    def test_rows_become_items(self, loader, tmp_path):
        path = _write(
            tmp_path / "verbs.csv",
            "hablar,verb,en,es,to speak,,\n"
            "ir,verb,en,es,to go,irregular,irse | marcharse\n",
        )

        report = loader.import_file(path)

        assert report.count == 2
        assert report.files == 1
        go = report.imported[1]
        assert go.infinitive == "ir"
        assert go.user_notes == "irregular"
        assert go.alternates == ("irse", "marcharse")
        assert loader.store.get_vocab_item(go.vocab_id) == go

    def test_blank_infinitive_skipped(self, loader, tmp_path):
        path = _write(tmp_path / "verbs.csv", ",verb,en,es,to speak,,\ncomer,verb,en,es,to eat,,\n")
        report = loader.import_file(path)
        assert report.count == 1
        assert report.skipped == 1

    def test_read_rows_yields_only_valid_rows(self, loader, tmp_path):
        path = _write(tmp_path / "verbs.csv", ",verb,en,es,to speak,,\ncomer,verb,en,es,to eat,,\n")
        report = ImportReport()

        rows = list(loader.read_rows(path, report))

        assert [row["infinitive"] for row in rows] == ["comer"]
        assert report.skipped == 1
        assert report.count == 0

    def test_minimal_columns(self, loader, tmp_path):
        path = _write(tmp_path / "min.csv", "vivir,to live\n", header="infinitive,hint\n")
        (item,) = loader.import_file(path).imported
        assert item.hint == "to live"
        assert item.alternates == ()

    def test_byte_order_mark(self, loader, tmp_path):
        path = _write(tmp_path / "bom.csv", "vivir,to live\n", header="infinitive,hint\n", encoding="utf-8-sig")
        assert loader.import_file(path).imported[0].infinitive == "vivir"

    def test_missing_required_column(self, loader, tmp_path):
        path = _write(tmp_path / "bad.csv", "vivir,verb\n", header="infinitive,part_of_speech\n")
        with pytest.raises(ValueError, match="hint"):
            loader.import_file(path)

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(FileNotFoundError):
            loader.import_file(tmp_path / "nope.csv")


class TestImportDirectory:
    def test_files_in_name_order(self, loader, tmp_path):
        _write(tmp_path / "b.csv", "comer,verb,en,es,to eat,,\n")
        _write(tmp_path / "a.csv", "hablar,verb,en,es,to speak,,\n")
        (tmp_path / "notes.txt").write_text("ignored")

        report = loader.import_directory(tmp_path)

        assert report.files == 2
        assert [item.infinitive for item in report.imported] == ["hablar", "comer"]

    def test_missing_directory(self, loader, tmp_path):
        with pytest.raises(FileNotFoundError):
            loader.import_directory(tmp_path / "missing")
