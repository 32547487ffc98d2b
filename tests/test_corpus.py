import io

import pytest

import corpus
from HMM import EvaluationWarning, HiddenMarkovModel


def test_tokenize():
    assert corpus.tokenize('While we watch , You chase\n') == ['while', 'we', 'watch', ',', 'you', 'chase']


def test_read_pairs(corpus_files):
    pairs = list(corpus.read_pairs(*corpus_files))

    assert len(pairs) == 5
    assert pairs[0] == (['the', 'dog', 'saw', 'the', 'cat', '.'], ['DET', 'N', 'V', 'DET', 'N', '.'])


def test_read_pairs_stops_at_shorter_file(tmp_path):
    sentences = tmp_path / 's.txt'
    tags = tmp_path / 't.txt'
    sentences.write_text('dogs bark .\ncats purr .\n', encoding='utf-8')
    tags.write_text('N V .\n', encoding='utf-8')

    assert list(corpus.read_pairs(sentences, tags)) == [(['dogs', 'bark', '.'], ['N', 'V', '.'])]


def test_tagging_accuracy():
    assert corpus.tagging_accuracy(['N', 'V', 'N'], ['N', 'V', '.']) == {'right': 2, 'wrong': 1}


def test_tagging_accuracy_needs_equal_lengths():
    with pytest.raises(ValueError):
        corpus.tagging_accuracy(['N'], ['N', 'V'])


def test_evaluate(fixture_model):
    words = ['i', 'chase', 'the', 'dog', '.']
    pairs = [
        (words, ['N', 'V', 'CNJ', 'N', 'V']),
        (words, ['N', 'V', 'CNJ', 'N', '.']),
        ([], []),
    ]

    result = corpus.evaluate(fixture_model, pairs)

    assert (result.right_lines, result.wrong_lines) == (1, 1)
    assert (result.right_tags, result.wrong_tags) == (9, 1)
    assert len(result.records) == 10
    assert result.records[-1] == ('.', '.', 'V')


def test_evaluate_skips_mismatched_pairs(fixture_model):
    with pytest.warns(EvaluationWarning, match="test pair 1"):
        result = corpus.evaluate(fixture_model, [(['dog'], ['N', 'V'])])

    assert result.right_lines + result.wrong_lines == 0
    assert result.records == []


def test_evaluate_counts_undecodable_lines_as_wrong():
    model = HiddenMarkovModel.from_tables({'A': {'x': 1}}, {'#': {'A': 1}})
    result = corpus.evaluate(model, [(['x', 'x'], ['A', 'A'])])

    assert result.wrong_lines == 1
    assert result.wrong_tags == 2


def test_accuracy_by_tag(fixture_model):
    words = ['i', 'chase', 'the', 'dog', '.']
    result = corpus.evaluate(fixture_model, [
        (words, ['N', 'V', 'CNJ', 'N', 'V']),
        (words, ['N', 'V', 'CNJ', 'N', '.']),
    ])

    frame = corpus.accuracy_by_tag(result)

    assert list(frame['tag']) == ['N', 'V', 'CNJ', '.']
    assert list(frame['total']) == [4, 3, 2, 1]
    assert list(frame['right']) == [4, 3, 2, 0]
    assert list(frame['accuracy']) == [1.0, 1.0, 1.0, 0.0]


class FakeBrown:

    def __init__(self):
        self.calls = []

    def tagged_sents(self, categories=None, tagset=None):
        self.calls.append((categories, tagset))
        return [[('The', 'DET'), ('Fulton', 'NOUN'), ('jury', 'NOUN'), ('.', '.')]]


def test_brown_pairs(monkeypatch):
    downloads = []
    fake = FakeBrown()
    monkeypatch.setattr(corpus.nltk, 'download', lambda name, quiet=False: downloads.append(name))
    monkeypatch.setattr(corpus, 'brown', fake)

    pairs = list(corpus.brown_pairs(categories='news'))

    assert pairs == [(['the', 'fulton', 'jury', '.'], ['DET', 'NOUN', 'NOUN', '.'])]
    assert downloads == ['brown', 'universal_tagset']
    assert fake.calls == [('news', 'universal')]


def test_pairs_from_uploaded_bytes():
    sentences = io.TextIOWrapper(io.BytesIO(b'Dogs bark .\nCats purr .\n'), encoding='utf-8')
    tags = ['N V .\n', 'N V .\n']

    assert list(corpus.pairs_from_lines(sentences, tags)) == [
        (['dogs', 'bark', '.'], ['N', 'V', '.']),
        (['cats', 'purr', '.'], ['N', 'V', '.']),
    ]
