from collections import Counter, namedtuple
import logging

import nltk
from nltk.corpus import brown
import pandas as pd

from HMM import EvaluationWarning, UndecodableError, skip_warning


logger = logging.getLogger(__name__)

Evaluation = namedtuple('Evaluation', ['right_lines', 'wrong_lines', 'right_tags', 'wrong_tags', 'records'])


def tokenize(sentence):
    return sentence.lower().split()


def read_pairs(sentences_path, tags_path):
    """Yield (words, tags) for each pair of lines in two parallel files.

    Reading stops at the end of the shorter file.
    """
    with open(sentences_path, encoding='utf-8') as sentences, open(tags_path, encoding='utf-8') as tags:
        yield from pairs_from_lines(sentences, tags)


def pairs_from_lines(sentences, tag_lines):

    for sentence, tag_line in zip(sentences, tag_lines):
        yield tokenize(sentence), tag_line.split()


def brown_pairs(tagset='universal', categories=None):

    nltk.download('brown', quiet=True)
    if tagset == 'universal':
        nltk.download('universal_tagset', quiet=True)

    for sentence in brown.tagged_sents(categories=categories, tagset=tagset):
        yield [word.lower() for word, _ in sentence], [tag for _, tag in sentence]


def tagging_accuracy(computed, correct):

    if len(computed) != len(correct):
        raise ValueError(f'cannot compare {len(computed)} computed tags with {len(correct)} correct tags')

    right = sum(1 for a, b in zip(computed, correct) if a == b)
    return {'right': right, 'wrong': len(correct) - right}


def evaluate(model, pairs):

    counts = Counter()
    records = []

    for number, (words, tags) in enumerate(pairs, 1):

        if not words and not tags:
            continue

        if len(words) != len(tags):
            skip_warning(f'test pair {number} has {len(words)} words but {len(tags)} tags, skipping it', EvaluationWarning)
            continue

        try:
            computed = model.predict(words)
        except UndecodableError:
            logger.warning('could not tag test sentence %d', number)
            computed = [None] * len(tags)

        accuracy = tagging_accuracy(computed, tags)
        counts['right_tags'] += accuracy['right']
        counts['wrong_tags'] += accuracy['wrong']

        # a line only counts as right when every one of its tags is
        if accuracy['wrong'] == 0:
            counts['right_lines'] += 1
        else:
            counts['wrong_lines'] += 1

        records.extend(zip(words, tags, computed))

    return Evaluation(counts['right_lines'], counts['wrong_lines'],
                      counts['right_tags'], counts['wrong_tags'], records)


def accuracy_by_tag(evaluation):

    frame = pd.DataFrame(evaluation.records, columns=['word', 'tag', 'computed'])
    frame['right'] = frame['tag'] == frame['computed']

    report_frame = frame.groupby('tag').agg(total=('right', 'size'), right=('right', 'sum'))
    report_frame['right'] = report_frame['right'].astype(int)
    report_frame['accuracy'] = report_frame['right'] / report_frame['total']

    return report_frame.sort_values('total', ascending=False, kind='stable').reset_index()
