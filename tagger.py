"""Command line front end for the HMM tagger.

    hmm-tagger train train-sentences.txt train-tags.txt -o model.pkl
    hmm-tagger train --brown -o model.pkl
    hmm-tagger evaluate test-sentences.txt test-tags.txt -m model.pkl --by-tag
    hmm-tagger tag -m model.pkl "I chase the dog ."
    hmm-tagger console -m model.pkl
"""

import argparse
import logging
import os
import sys

from HMM import DEFAULT_MODEL_PATH, HiddenMarkovModel, TaggingError, log_step
import corpus


logger = logging.getLogger(__name__)

CONSOLE_GUIDE = """Console Test Formatting Guide:
1. Enter a space between every element of the sentence (words, punctuation, etc.)
2. Capitalization does not matter
"""


def load_model(path, observer=None):

    model = HiddenMarkovModel(observer=observer)
    model.load(path)
    logger.info('loaded model from %s', path)

    return model


def cmd_train(args, observer):

    if args.brown:
        pairs = corpus.brown_pairs(tagset=args.tagset)
    elif args.sentences and args.tags:
        pairs = corpus.read_pairs(args.sentences, args.tags)
    else:
        raise SystemExit('train needs SENTENCES and TAGS files, or --brown')

    model = HiddenMarkovModel(observer=observer)
    summary = model.train(pairs)
    model.save(args.output)

    print(f'Trained on {summary.pairs} sentences ({summary.skipped} skipped): '
          f'{summary.tags} tags, {summary.vocabulary} words. Saved to {args.output}')
    return 0


def cmd_evaluate(args, observer):

    model = load_model(args.model, observer)
    result = corpus.evaluate(model, corpus.read_pairs(args.sentences, args.tags))

    lines = result.right_lines + result.wrong_lines
    tags = result.right_tags + result.wrong_tags
    print(f'Out of {lines} lines, {result.right_lines} were tagged correctly and {result.wrong_lines} incorrectly.')
    print(f'Out of {tags} tags, {result.right_tags} were correct and {result.wrong_tags} were incorrect.')

    if args.by_tag:
        print(corpus.accuracy_by_tag(result).to_string(index=False))

    return 0


def cmd_tag(args, observer):

    model = load_model(args.model, observer)
    sentence = ' '.join(args.sentence)

    try:
        print(' '.join(model.tag_sentence(sentence)))
    except TaggingError as e:
        print(f'error: {e}', file=sys.stderr)
        return 1

    return 0


def cmd_console(args, observer, stdin=None):

    model = load_model(args.model, observer)
    stdin = stdin or sys.stdin

    print(CONSOLE_GUIDE)
    while True:
        print('Enter a sentence >> ', end='', flush=True)
        sentence = stdin.readline()
        if not sentence:
            break

        try:
            print('Tagged Sentence: ' + ' '.join(model.tag_sentence(sentence)) + '\n')
        except TaggingError as e:
            print(f'error: {e}', file=sys.stderr)

        print('Try another sentence? Enter y for yes or n for no >> ', end='', flush=True)
        choice = stdin.readline().strip().lower()
        if not choice.startswith('y'):
            break

    return 0


def build_parser():

    parser = argparse.ArgumentParser(prog='hmm-tagger', description='Part of speech tagging with a Hidden Markov Model.')
    parser.add_argument('--debug', action='store_true', help='log every training step and Viterbi step')
    parser.add_argument('--log-level', default='WARNING', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])

    default_model = os.environ.get('HMM_MODEL', DEFAULT_MODEL_PATH)
    commands = parser.add_subparsers(dest='command', required=True)

    train = commands.add_parser('train', help='train a model and pickle it')
    train.add_argument('sentences', nargs='?', help='one sentence per line, tokens separated by spaces')
    train.add_argument('tags', nargs='?', help='one line of tags per sentence')
    train.add_argument('--brown', action='store_true', help='train on the nltk Brown corpus instead')
    train.add_argument('--tagset', default='universal', help='Brown tagset, "universal" or "" for the original tags')
    train.add_argument('-o', '--output', default=default_model)
    train.set_defaults(func=cmd_train)

    evaluate = commands.add_parser('evaluate', help='tag a test set and count right and wrong tags')
    evaluate.add_argument('sentences')
    evaluate.add_argument('tags')
    evaluate.add_argument('-m', '--model', default=default_model)
    evaluate.add_argument('--by-tag', action='store_true', help='also print accuracy per tag')
    evaluate.set_defaults(func=cmd_evaluate)

    tag = commands.add_parser('tag', help='tag one sentence')
    tag.add_argument('sentence', nargs='+')
    tag.add_argument('-m', '--model', default=default_model)
    tag.set_defaults(func=cmd_tag)

    console = commands.add_parser('console', help='tag sentences typed on the console')
    console.add_argument('-m', '--model', default=default_model)
    console.set_defaults(func=cmd_console)

    return parser


def main(argv=None):

    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else args.log_level,
                        format='%(asctime)s %(name)s %(levelname)s %(message)s')
    observer = log_step if args.debug else None

    try:
        return args.func(args, observer)
    except FileNotFoundError as e:
        print(f'error: {e}', file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
