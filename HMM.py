from collections import namedtuple
import logging
import math
import pickle
import warnings


START_TAG = '#'
UNSEEN_SCORE = -15.625
DEFAULT_MODEL_PATH = 'model.pkl'

logger = logging.getLogger(__name__)


class TaggingError(Exception):
    pass


class NotTrainedError(TaggingError):
    pass


class UndecodableError(TaggingError):
    pass


class TrainingWarning(UserWarning):
    pass


class EvaluationWarning(UserWarning):
    pass


def skip_warning(message, category=TrainingWarning):
    logger.warning(message)
    warnings.warn(message, category, stacklevel=3)


class ProbabilityTable:

    # outer key -> inner key -> count while counting, log-probability after normalize.
    # totals live beside the counts so no token or tag can collide with them
    def __init__(self):

        self.table = {}
        self.totals = {}

    def increment(self, outer, inner):

        counts = self.table.setdefault(outer, {})
        counts[inner] = counts.get(inner, 0) + 1
        self.totals[outer] = self.totals.get(outer, 0) + 1

    def ensure(self, outer):

        self.table.setdefault(outer, {})

    def normalize(self, outer):
        """Turn the counts of ``outer`` into natural-log probabilities.

        Returns False (after reporting a TrainingWarning) when there is nothing
        to normalize, so callers can skip the key and carry on.
        """
        counts = self.table.get(outer)
        if counts is None:
            skip_warning(f'no counts recorded for {outer!r}, skipping normalization')
            return False

        total = self.totals.pop(outer, None)
        if total is None:
            if counts:
                skip_warning(f'counts for {outer!r} have already been normalized')
                return False
            return True

        for key, count in counts.items():
            counts[key] = math.log(count / total)

        return True

    def get(self, outer, default=None):
        return self.table.get(outer, default)

    def keys(self):
        return self.table.keys()

    def items(self):
        return self.table.items()

    def to_dict(self):
        return {outer: dict(inner) for outer, inner in self.table.items()}

    def __contains__(self, outer):
        return outer in self.table

    def __len__(self):
        return len(self.table)

    def __repr__(self):
        return f'ProbabilityTable({self.table!r})'

    @classmethod
    def from_counts(cls, counts):

        table = cls()
        for outer, inner in counts.items():
            if any(count < 0 for count in inner.values()):
                raise ValueError(f"negative count in {outer!r}: {dict(inner)!r}")

            # a zero count is an event that was never seen
            table.table[outer] = {key: count for key, count in inner.items() if count > 0}
            table.totals[outer] = sum(table.table[outer].values())

        return table


ViterbiStep = namedtuple('ViterbiStep', ['position', 'token', 'scores', 'next_scores', 'backpointers'])


def log_step(step):

    logger.debug('processed %r (%d): frontier %s', step.token, step.position + 1, step.scores)
    logger.debug('    next scores %s', step.next_scores)
    logger.debug('    backpointers %s', step.backpointers)


class Viterbi:

    # transition_probs includes the start tag as an outer key.
    # emission_probs are log P(word|tag); words missing there score unseen_score
    def __init__(self, transition_probs, emission_probs, unseen_score=UNSEEN_SCORE, observer=None):

        self.transition_probs = transition_probs
        self.emission_probs = emission_probs
        self.unseen_score = unseen_score
        self.observer = observer

        # destinations are visited in sorted order so ties always go to the same tag
        self.successors = {
            tag: sorted(destinations.items())
            for tag, destinations in transition_probs.items()
        }

    @property
    def tags(self):

        tags = set(self.emission_probs)
        for tag, destinations in self.transition_probs.items():
            tags.add(tag)
            tags.update(destinations)
        tags.discard(START_TAG)

        return tags

    def emission_score(self, tag, word):
        return self.emission_probs.get(tag, {}).get(word, self.unseen_score)

    def viterbi(self, sentence):
        """Return the best tag sequence for ``sentence``, or None if no tag can be reached."""
        if not sentence:
            return None

        scores = {START_TAG: 0.0}
        backpointers = []  # one dict per word: tag -> the tag it came from

        best_score = None
        best_last_tag = None
        last = len(sentence) - 1

        for t, word in enumerate(sentence):
            next_scores = {}
            pointers = {}

            for prev_tag in sorted(scores):
                prev_score = scores[prev_tag]

                for curr_tag, transition in self.successors.get(prev_tag, ()):
                    score = prev_score + transition + self.emission_score(curr_tag, word)

                    # keep only the best way into curr_tag, whichever tag it came from
                    if curr_tag not in next_scores or score > next_scores[curr_tag]:
                        next_scores[curr_tag] = score
                        pointers[curr_tag] = prev_tag

                    if t == last and (best_last_tag is None or score > best_score):
                        best_score = score
                        best_last_tag = curr_tag

            if self.observer is not None:
                self.observer(ViterbiStep(t, word, scores, next_scores, pointers))

            backpointers.append(pointers)
            scores = next_scores

            if not scores:
                return None

        path = [best_last_tag]
        for pointers in reversed(backpointers[1:]):
            path.append(pointers[path[-1]])
        path.reverse()

        return path

    def score(self, sentence, tags):
        """Score one tag path the way viterbi() does; None if it uses an unseen transition."""
        if len(sentence) != len(tags):
            raise ValueError('sentence and tags differ in length')

        total = 0.0
        prev_tag = START_TAG

        for word, tag in zip(sentence, tags):
            transition = self.transition_probs.get(prev_tag, {}).get(tag)
            if transition is None:
                return None
            total += transition + self.emission_score(tag, word)
            prev_tag = tag

        return total


def normalize_tables(emissions, transitions):

    for tag in list(transitions.keys()):
        transitions.normalize(tag)
        if tag != START_TAG:
            emissions.normalize(tag)

    # tags that only ever end a sentence emit but never transition
    for tag in list(emissions.keys()):
        if tag not in transitions:
            emissions.normalize(tag)


TrainingSummary = namedtuple('TrainingSummary', ['pairs', 'skipped', 'tags', 'vocabulary'])


class HiddenMarkovModel:

    def __init__(self, unseen_score=UNSEEN_SCORE, observer=None):

        self.unseen_score = unseen_score
        self.observer = observer
        self.viterbi = None

    @property
    def is_trained(self):
        return self.viterbi is not None

    def train(self, train_data):

        emissions = ProbabilityTable()
        transitions = ProbabilityTable()
        transitions.ensure(START_TAG)

        used = 0
        skipped = 0

        for number, (words, tags) in enumerate(train_data, 1):

            if len(words) != len(tags):
                skip_warning(f'training pair {number} has {len(words)} words but {len(tags)} tags, skipping it')
                skipped += 1
                continue

            if START_TAG in tags:
                skip_warning(f'training pair {number} uses the reserved start tag {START_TAG!r}, skipping it')
                skipped += 1
                continue

            prev_tag = START_TAG

            for word, tag in zip(words, tags):
                emissions.increment(tag, word)
                transitions.increment(prev_tag, tag)
                prev_tag = tag

            used += 1

        logger.debug('counted %d pairs: %d tags with transitions, %d tags with emissions',
                     used, len(transitions), len(emissions))

        normalize_tables(emissions, transitions)
        self.viterbi = Viterbi(transitions.to_dict(), emissions.to_dict(), self.unseen_score, self.observer)

        vocabulary = {word for inner in emissions.table.values() for word in inner}
        summary = TrainingSummary(used, skipped, len(self.viterbi.tags), len(vocabulary))
        logger.info('trained on %d pairs (%d skipped): %d tags, %d words',
                    summary.pairs, summary.skipped, summary.tags, summary.vocabulary)

        return summary

    @classmethod
    def from_tables(cls, emission_counts, transition_counts, **kwargs):

        # raw counts written by hand, normalized the same way train() does it.
        # the start tag may only appear as a transition source
        if START_TAG in emission_counts:
            skip_warning(f'dropping emissions for the reserved start tag {START_TAG!r}')
            emission_counts = {tag: inner for tag, inner in emission_counts.items() if tag != START_TAG}

        cleaned = {}
        for tag, destinations in transition_counts.items():
            if START_TAG in destinations:
                skip_warning(f'dropping transition {tag!r} -> {START_TAG!r} into the reserved start tag')
                destinations = {dest: count for dest, count in destinations.items() if dest != START_TAG}
            cleaned[tag] = destinations
        transition_counts = cleaned

        emissions = ProbabilityTable.from_counts(emission_counts)
        transitions = ProbabilityTable.from_counts(transition_counts)
        transitions.ensure(START_TAG)
        normalize_tables(emissions, transitions)

        model = cls(**kwargs)
        model.viterbi = Viterbi(transitions.to_dict(), emissions.to_dict(), model.unseen_score, model.observer)

        return model

    def predict(self, sentence):

        if self.viterbi is None:
            raise NotTrainedError('the model has not been trained')

        tags = self.viterbi.viterbi(sentence)
        if tags is None:
            raise UndecodableError(f'no tag sequence reaches the end of {sentence!r}')

        return tags

    def tag_sentence(self, sentence):

        return self.predict(sentence.lower().split())

    def save(self, filename=DEFAULT_MODEL_PATH):

        if self.viterbi is None:
            raise NotTrainedError('nothing to save, the model has not been trained')

        tables = {
            'transitions': self.viterbi.transition_probs,
            'emissions': self.viterbi.emission_probs,
        }
        with open(filename, 'wb') as out:
            pickle.dump(tables, out, pickle.HIGHEST_PROTOCOL)

    def load(self, filename=DEFAULT_MODEL_PATH):

        with open(filename, 'rb') as inp:
            tables = pickle.load(inp)

        self.viterbi = Viterbi(tables['transitions'], tables['emissions'], self.unseen_score, self.observer)
