import argparse
import json
import logging
import sys

import bookcheck
from bookcheck import __version__
from bookcheck.exceptions import BuildError, DocumentError, \
    LanguageUnavailableError


def make_parser():
    """
    Creates parser object.
    """

    parser = argparse.ArgumentParser(
        prog='bookcheck',
        description='Check the code snippets of Markdown chapters',
    )
    parser.add_argument('--version', '-v', action='version',
                        version='%(prog)s ' + __version__)
    parser.add_argument('--debug', action='store_true',
                        help='show debug messages')
    subparsers = parser.add_subparsers(
        title='subcommands',
        description='valid subcommands',
    )

    # bookcheck check <path> ...
    check_parser = subparsers.add_parser(
        'check', help='check fences, snippet syntax and chapter numbering'
    )
    check_parser.add_argument('paths', nargs='+',
                              help='markdown files or directories')
    check_parser.add_argument(
        '--lang', '-l', action='append', dest='languages',
        help='only check snippets of the given language (can be repeated)'
    )
    check_parser.add_argument(
        '--require-language', action='store_true',
        help='warn about code blocks without a language tag'
    )
    check_parser.add_argument(
        '--no-numbering', action='store_false', dest='numbering',
        help='do not check chapter numbering'
    )
    check_parser.add_argument(
        '--pattern', '-p',
        help='regex for chapter headings with a group named "number"'
    )
    check_parser.add_argument('--json', action='store_true',
                              help='print report as JSON')
    check_parser.add_argument('--show-info', action='store_true',
                              help='also show informative messages')
    check_parser.set_defaults(func=command_check)

    # bookcheck list <path> ...
    list_parser = subparsers.add_parser(
        'list', help='list code blocks'
    )
    list_parser.add_argument('paths', nargs='+',
                             help='markdown files or directories')
    list_parser.add_argument('--lang', '-l',
                             help='only list snippets of the given language')
    list_parser.set_defaults(func=command_list)

    # bookcheck run <file>
    run_parser = subparsers.add_parser(
        'run', help='run a source file or a code block of a chapter'
    )
    run_parser.add_argument('file', help='source file or markdown chapter')
    run_parser.add_argument('--lang', '-l', help='language of the source')
    run_parser.add_argument(
        '--block', '-b', type=int,
        help='run the N-th code block of a markdown chapter (1-based)'
    )
    run_parser.add_argument(
        '--inputs', '-i',
        help='a file with one input string per line'
    )
    run_parser.add_argument('--timeout', '-t', type=float,
                            help='time limit in seconds')
    run_parser.set_defaults(func=command_run)

    # bookcheck extract <path> ... --dest <dir>
    extract_parser = subparsers.add_parser(
        'extract', help='save code blocks as individual source files'
    )
    extract_parser.add_argument('paths', nargs='+',
                                help='markdown files or directories')
    extract_parser.add_argument('--dest', '-d', required=True,
                                help='destination directory')
    extract_parser.add_argument('--lang', '-l',
                                help='only extract the given language')
    extract_parser.set_defaults(func=command_extract)

    return parser


def command_check(args):
    """
    Implements "bookcheck check <path> ..." command.
    """

    report = bookcheck.check(
        args.paths,
        languages=args.languages,
        require_language=args.require_language,
        numbering=args.numbering,
        pattern=args.pattern,
    )
    if args.json:
        print(json.dumps(report.to_json(), indent=2))
    else:
        print(report.as_text(show_info=args.show_info))
    return 0 if report.is_ok else 1


def command_list(args):
    """
    Implements "bookcheck list <path> ..." command.
    """

    for document, block in bookcheck.snippets(args.paths, args.lang):
        nlines = len(block.source.splitlines())
        status = '' if block.is_closed else ' (unclosed)'
        print('%s:%s: %s, %s line(s)%s' % (document.name, block.line,
                                          block.lang or '<none>', nlines,
                                          status))
    return 0


def command_run(args):
    """
    Implements "bookcheck run <file>" command.
    """

    inputs = ()
    if args.inputs:
        with open(args.inputs) as F:
            inputs = F.read().splitlines()

    if args.block is not None:
        if args.block < 1:
            raise ValueError('block numbers start at 1')
        document = bookcheck.parse_file(args.file)
        try:
            block = document.blocks[args.block - 1]
        except IndexError:
            raise ValueError('%s has %s code block(s)' %
                             (args.file, len(document.blocks)))
        lang = args.lang or block.lang
        result = bookcheck.run(block.source, lang, inputs,
                               timeout=args.timeout, path=args.file,
                               line=block.first_line)
    else:
        with open(args.file) as F:
            source = F.read()
        result = bookcheck.run(source, args.lang, inputs,
                               timeout=args.timeout, path=args.file)

    print(result.as_text())
    return 0 if result.is_ok else 1


def command_extract(args):
    """
    Implements "bookcheck extract <path> ... --dest <dir>" command.
    """

    for path in bookcheck.extract(args.paths, args.dest, args.lang):
        print(path)
    return 0


def main(argv=None):
    """
    Executes the main script.
    """

    parser = make_parser()
    args = parser.parse_args(argv)
    if args.debug:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(levelname)s: %(message)s')

    try:
        func = args.func
    except AttributeError:
        print('Type `bookcheck --help` for usage.')
        return 2

    try:
        return func(args)
    except (BuildError, DocumentError, LanguageUnavailableError,
            ValueError, OSError) as ex:
        print('error: %s' % ex, file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
