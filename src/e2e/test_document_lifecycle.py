import dataclasses
import re
import threading

import pytest

from gramscore import (
    ArgumentError,
    CleanError,
    ConfigurationError,
    Document,
    Scores,
    ScoringError,
    State,
    SubstringQuantity,
    TextRules,
    score_text,
)

TEXT = "The cat sat. The cat ran."


class ToggleScorer:
    """Scores normally until `refuse` is set, then rejects anything with 'ran'."""
    def __init__(self):
        self.refuse = False

    def __call__(self, text):
        if self.refuse and "ran" in text:
            raise ScoringError(f"refusing {text!r}")
        return score_text(text)


def _zap_rules() -> TextRules:
    def picky(span):
        if "zap" in span:
            raise ValueError("zap")
        return re.sub(r"[^A-Za-z0-9\s]+", "", span.strip())
    return dataclasses.replace(TextRules.default(), sanitizer=picky)


def test_new_document_is_empty():
    doc = Document(TEXT)
    assert doc.state is State.EMPTY
    assert doc.sorted_substrings() == []
    assert doc.render() == ""
    assert doc.summary is None


def test_fragments_are_joined_with_one_space():
    assert Document("The cat sat.", "The cat ran.").input == TEXT


def test_non_string_fragment_is_rejected():
    with pytest.raises(ArgumentError):
        Document("ok", 3)


def test_state_machine():
    doc = Document(TEXT)
    doc.parse()
    assert doc.state is State.INDEXED
    doc.parse()
    assert doc.state is State.INDEXED
    doc.score()
    assert doc.state is State.SCORED
    doc.score()
    assert doc.state is State.SCORED
    doc.parse()
    assert doc.state is State.INDEXED
    assert doc.scores == {} and doc.summary is None
    assert doc.inverse("simple") == {}


def test_parse_twice_is_not_cumulative():
    doc = Document(TEXT).parse()
    first = doc.frequencies
    assert doc.parse().frequencies == first
    assert first["the cat"] == 2


def test_parse_with_new_text_replaces_input():
    doc = Document(TEXT).parse().score()
    doc.parse("A dog barked.")
    assert doc.input == "A dog barked."
    assert set(doc.frequencies) == {"a", "a dog", "a dog barked", "dog", "dog barked", "barked"}
    assert doc.state is State.INDEXED


def test_sorted_substrings_count_desc_then_text_asc():
    doc = Document(TEXT).parse()
    rows = doc.sorted_substrings()
    assert rows[:3] == [SubstringQuantity("cat", 2), SubstringQuantity("the", 2), SubstringQuantity("the cat", 2)]
    assert [r.substring for r in rows[3:]] == ["cat ran", "cat sat", "ran", "sat", "the cat ran", "the cat sat"]


def test_render_indexed_and_scored():
    doc = Document("The cat sat.").parse()
    lines = doc.render().splitlines()
    assert lines[0] == '"cat": 1'
    assert len(lines) == 6
    doc.score()
    assert doc.render().splitlines()[0] == (
        '"cat": 1 [English 144] [Jewish 104] [Simple 24] [Mystery 6] [Majestic 57] [Eights 192]'
    )
    assert str(doc) == doc.render()


def test_score_builds_consistent_indices():
    doc = Document(TEXT).parse().score()
    keys = set(doc.frequencies)
    assert set(doc.scores) == keys
    for scheme in ("english", "jewish", "simple", "mystery", "majestic", "eights"):
        inv = doc.inverse(scheme)
        assert sorted(ng for ngrams in inv.values() for ng in ngrams) == sorted(keys)
        assert all(ngrams == sorted(ngrams) for ngrams in inv.values())
    assert doc.ngrams_with_score("simple", 33) == ["ran", "the"]
    assert doc.ngrams_with_score("simple", 99999) == []
    assert doc.summary is None
    assert doc.summarize().summary == score_text(TEXT)
    assert doc.state is State.SCORED


def test_unknown_scheme_is_argument_error():
    doc = Document(TEXT).parse().score()
    with pytest.raises(ArgumentError):
        doc.inverse("roman")
    with pytest.raises(ArgumentError):
        doc.ngrams_with_score("roman", 1)


def test_score_from_empty_succeeds_trivially():
    doc = Document(TEXT).score()
    assert doc.state is State.SCORED
    assert doc.frequencies == {} and doc.scores == {}
    assert doc.summary is None


def test_failed_scoring_leaves_indexed_document_untouched():
    scorer = ToggleScorer()
    scorer.refuse = True
    doc = Document(TEXT, scorer=scorer).parse()
    before = doc.frequencies
    with pytest.raises(ScoringError) as ei:
        doc.score()
    assert len(ei.value.causes) == 3
    assert doc.state is State.INDEXED
    assert doc.frequencies == before
    assert doc.scores == {} and doc.summary is None
    assert all(doc.inverse(s) == {} for s in ("english", "eights"))


def test_failed_scoring_leaves_scored_document_untouched():
    scorer = ToggleScorer()
    doc = Document(TEXT, scorer=scorer).parse().score()
    scores, inverse, summary = doc.scores, doc.inverse("jewish"), doc.summary
    scorer.refuse = True
    with pytest.raises(ScoringError):
        doc.score()
    assert doc.state is State.SCORED
    assert doc.scores == scores
    assert doc.inverse("jewish") == inverse
    assert doc.summary == summary


def test_failed_parse_leaves_previous_index():
    doc = Document("good words here.", rules=_zap_rules()).parse().score()
    freq, scores = doc.frequencies, doc.scores
    with pytest.raises(CleanError) as ei:
        doc.parse("now zap it. zap again.")
    assert len(ei.value.causes) > 1
    assert doc.input == "good words here."
    assert doc.frequencies == freq
    assert doc.scores == scores
    assert doc.state is State.SCORED


def test_missing_boundary_rule_is_configuration_error():
    doc = Document(TEXT, rules=TextRules())
    with pytest.raises(ConfigurationError):
        doc.parse()
    assert doc.state is State.EMPTY


def test_results_identical_across_parallelism():
    text = " ".join([TEXT, "Dr. Who met Mr. Smith! Did they talk? They did, e.g. twice."] * 5)
    docs = [Document(text, workers=w).parse().score() for w in (1, 2, 16)]
    docs.append(Document(text, workers=4, mode="procs").parse().score())
    base = docs[0]
    for d in docs[1:]:
        assert d.sorted_substrings() == base.sorted_substrings()
        assert d.render() == base.render()
        for scheme in ("english", "majestic"):
            assert d.inverse(scheme) == base.inverse(scheme)


def test_readers_never_see_half_built_index():
    doc = Document(TEXT).parse()
    views = {tuple(doc.sorted_substrings())}
    doc.parse("A dog barked.")
    views.add(tuple(doc.sorted_substrings()))

    stop = threading.Event()
    seen = set()

    def reader():
        while not stop.is_set():
            seen.add(tuple(doc.sorted_substrings()))

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    try:
        for i in range(30):
            doc.parse(TEXT if i % 2 else "A dog barked.")
    finally:
        stop.set()
        for t in threads:
            t.join()
    assert seen <= views


def test_ngram_scoring_ignores_unscoreable_whole_text():
    # every cleaned n-gram is ASCII, only the raw input holds "ß"
    doc = Document("Die Straße.").parse().score()
    assert doc.state is State.SCORED
    assert sorted(doc.scores) == ["die", "die strae", "strae"]
    assert doc.summary is None
    with pytest.raises(ScoringError):
        doc.summarize()
    assert doc.state is State.SCORED
    assert doc.summary is None


def test_summary_survives_reparse_of_same_input_only():
    doc = Document(TEXT).summarize().parse().score()
    summary = doc.summary
    assert summary == score_text(TEXT)
    assert doc.parse().summary == summary
    assert doc.parse("A dog barked.").summary is None


def test_failing_splitter_is_configuration_error():
    def explode(_text):
        raise ValueError("boundary rule exploded")

    doc = Document(TEXT, rules=dataclasses.replace(TextRules.default(), splitter=explode))
    with pytest.raises(ConfigurationError) as ei:
        doc.parse()
    assert isinstance(ei.value.causes[0], ValueError)
    assert doc.state is State.EMPTY
