import json
from pathlib import Path

import pytest

from gramscore import ArgumentError, Document, State, build_document
from gramscore.storage import load_document, save_document

TEXT = "To be, or not to be: that is the question. The question remains."


@pytest.mark.e2e
def test_persist_and_reload(tmp_path: Path):
    doc = build_document(TEXT)
    path = tmp_path / "nested" / "doc.json"
    save_document(doc, str(path))
    assert path.exists()
    assert not Path(f"{path}.tmp").exists()

    again = load_document(str(path))
    assert again.state is State.SCORED
    assert again.input == TEXT
    assert again.sorted_substrings() == doc.sorted_substrings()
    assert again.scores == doc.scores
    assert again.summary == doc.summary
    assert again.inverse("mystery") == doc.inverse("mystery")
    assert again.render() == doc.render()


def test_record_uses_short_keys():
    rec = build_document("The cat sat.").to_record()
    assert set(rec) == {"in", "st", "gem", "subs", "gems", "sen", "sje", "ssi", "smy", "smj", "sei"}
    assert rec["ssi"]["24"] == ["cat"]
    json.dumps(rec)


def test_indexed_record_round_trip():
    doc = Document("The cat sat.").parse()
    again = Document.from_record(doc.to_record())
    assert again.state is State.INDEXED
    assert again.frequencies == doc.frequencies
    assert again.summary is None


def test_inconsistent_records_are_rejected():
    rec = build_document("The cat sat.").to_record()

    extra = dict(rec, subs=dict(rec["subs"], dog=1))
    with pytest.raises(ArgumentError):
        Document.from_record(extra)

    wrong_bucket = dict(rec, ssi={"1": ["cat"]})
    with pytest.raises(ArgumentError):
        Document.from_record(wrong_bucket)

    with pytest.raises(ArgumentError):
        Document.from_record(dict(rec, st="indexed"))

    with pytest.raises(ArgumentError):
        Document.from_record(dict(rec, st="bogus"))

    with pytest.raises(ArgumentError):
        Document.from_record({"st": "empty"})


def test_corrupt_file_is_argument_error(tmp_path: Path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ArgumentError):
        load_document(str(bad))
