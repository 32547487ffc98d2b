import pytest

from HMM import HiddenMarkovModel


# raw counts from the hand-worked drill
FIXTURE_TRANSITIONS = {
    '#': {'NP': 3, 'N': 7},
    'NP': {'V': 8, 'CNJ': 2},
    'N': {'V': 8, 'CNJ': 2},
    'CNJ': {'V': 4, 'NP': 2, 'N': 4},
    'V': {'CNJ': 2, 'NP': 4, 'N': 4},
}

FIXTURE_EMISSIONS = {
    'NP': {'chase': 10},
    'N': {'cat': 4, 'dog': 4, 'watch': 2},
    'CNJ': {'and': 10},
    'V': {'get': 1, 'chase': 3, 'watch': 6},
}

TRAIN_SENTENCES = [
    "The dog saw the cat .",
    "The cat saw a dog .",
    "A dog chased the cat .",
    "The cat and the dog slept .",
    "Dogs chase cats .",
]

TRAIN_TAGS = [
    "DET N V DET N .",
    "DET N V DET N .",
    "DET N V DET N .",
    "DET N CNJ DET N V .",
    "N V N .",
]


@pytest.fixture
def fixture_model():
    return HiddenMarkovModel.from_tables(FIXTURE_EMISSIONS, FIXTURE_TRANSITIONS)


@pytest.fixture
def train_pairs():
    return [(s.lower().split(), t.split()) for s, t in zip(TRAIN_SENTENCES, TRAIN_TAGS)]


@pytest.fixture
def trained_model(train_pairs):
    model = HiddenMarkovModel()
    model.train(train_pairs)
    return model


@pytest.fixture
def corpus_files(tmp_path):
    sentences = tmp_path / 'train-sentences.txt'
    tags = tmp_path / 'train-tags.txt'
    sentences.write_text('\n'.join(TRAIN_SENTENCES) + '\n', encoding='utf-8')
    tags.write_text('\n'.join(TRAIN_TAGS) + '\n', encoding='utf-8')
    return sentences, tags
