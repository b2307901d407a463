import logging
import re

from bookcheck.document import CHAPTER_PATTERN, compile_pattern
from bookcheck.exceptions import LanguageUnavailableError
from bookcheck.registry_class import registry

logger = logging.getLogger('bookcheck')

LEVELS = ('error', 'warning', 'info')
_error_line = re.compile(r'^line (\d+):')


class Issue:
    """
    A problem found in a chapter.

    Attributes:
        path (str):
            Document path (or '<string>').
        line (int):
            1-based line in the document.
        code (str):
            Rule name, e.g. 'syntax-error'.
        message (str):
            Description of the problem.
        level (str):
            One of 'error', 'warning' or 'info'.
    """

    def __init__(self, path, line, code, message, level='error'):
        if level not in LEVELS:
            raise ValueError('invalid level: %r' % level)
        self.path = path
        self.line = line
        self.code = code
        self.message = message
        self.level = level

    def __repr__(self):
        return 'Issue(%r, %r, %r, %r)' % (self.path, self.line, self.code,
                                          self.level)

    def __str__(self):
        return '%s:%s: %s [%s] %s' % (self.path, self.line, self.level,
                                      self.code, self.message)

    def to_json(self):
        return {
            'path': self.path,
            'line': self.line,
            'code': self.code,
            'message': self.message,
            'level': self.level,
        }


class Report:
    """
    Issues collected for a set of documents.
    """

    def __init__(self, issues=(), documents=()):
        self.documents = list(documents)
        order = {doc.name: idx for idx, doc in enumerate(self.documents)}
        self.issues = sorted(
            issues,
            key=lambda x: (order.get(x.path, len(order)), x.path, x.line)
        )

    def __iter__(self):
        return iter(self.issues)

    def __len__(self):
        return len(self.issues)

    @property
    def errors(self):
        return [x for x in self.issues if x.level == 'error']

    @property
    def warnings(self):
        return [x for x in self.issues if x.level == 'warning']

    @property
    def is_ok(self):
        return not self.errors

    def codes(self):
        return [x.code for x in self.issues]

    def counts(self):
        """
        Return a dictionary mapping each level to the number of issues.
        """

        counts = dict.fromkeys(LEVELS, 0)
        for issue in self.issues:
            counts[issue.level] += 1
        counts['documents'] = len(self.documents)
        counts['blocks'] = sum(len(doc.blocks) for doc in self.documents)
        return counts

    def as_text(self, show_info=False):
        """
        Render report as plain text, one issue per line followed by a summary.
        """

        lines = [str(x) for x in self.issues
                 if show_info or x.level != 'info']
        counts = self.counts()
        lines.append(
            '%(error)s error(s), %(warning)s warning(s) in %(blocks)s code '
            'block(s) from %(documents)s document(s)' % counts
        )
        return '\n'.join(lines)

    def to_json(self):
        return {
            'issues': [x.to_json() for x in self.issues],
            'counts': self.counts(),
            'ok': self.is_ok,
        }


def check_document(document, languages=None, require_language=False):
    """
    Check all code blocks of a document.

    Args:
        document:
            A :class:`bookcheck.Document` instance.
        languages (list):
            If given, only blocks of these languages are checked.
        require_language (bool):
            Emit a warning for fenced blocks without a language tag.

    Returns:
        A list of :class:`Issue` instances.
    """

    path = document.name
    if languages is not None:
        languages = {registry.language_from_tag(x) or x for x in languages}
    issues = []

    for block in document.blocks:
        if not block.is_closed:
            issues.append(Issue(
                path, block.line, 'unclosed-fence',
                'code block opened with %r is never closed' % block.fence
            ))
            continue

        if block.lang is None:
            if require_language:
                issues.append(Issue(path, block.line, 'missing-language',
                                    'code block has no language tag',
                                    'warning'))
            continue

        lang = registry.language_from_tag(block.lang)
        if lang is None:
            issues.append(Issue(path, block.line, 'unknown-language',
                                'no checker for %r blocks' % block.lang,
                                'info'))
            continue

        if block.skip:
            issues.append(Issue(path, block.line, 'skipped',
                                'skipped by pragma', 'info'))
            continue

        if languages is not None and lang not in languages:
            issues.append(Issue(path, block.line, 'skipped',
                                '%s blocks are not selected' % lang, 'info'))
            continue

        issue = check_block(block, lang, path)
        if issue is not None:
            issues.append(issue)

    logger.debug('%s: %s issue(s)' % (path, len(issues)))
    return issues


def check_block(block, lang, path='<string>'):
    """
    Run the syntax check for a single code block.

    Return an Issue or None if the block is valid.
    """

    manager = registry.build_manager(lang, block.source, path=path,
                                     line=block.first_line)
    try:
        manager.syntax_check()
    except SyntaxError as ex:
        message = str(ex)
        m = _error_line.match(message)
        line = int(m.group(1)) if m else block.line
        return Issue(path, line, 'syntax-error',
                     '%s: %s' % (lang, message))
    except LanguageUnavailableError as ex:
        manager.log('debug', 'cannot check %s block: %s' % (lang, ex))
        return Issue(path, block.line, 'skipped', str(ex), 'info')
    return None


def check_numbering(documents, pattern=CHAPTER_PATTERN):
    """
    Check that chapter headings are numbered 1, 2, ..., N in document order.
    """

    pattern = compile_pattern(pattern)

    issues = []
    seen = {}
    expected = 1
    for document in documents:
        path = document.name
        number = document.chapter_number(pattern)
        line = document.title.line if document.title is not None else 1

        if number is None:
            issues.append(Issue(
                path, line, 'missing-chapter-heading',
                'no level 1 heading matching %r' % pattern.pattern
            ))
            continue

        if number in seen:
            issues.append(Issue(
                path, line, 'duplicate-chapter',
                'chapter %s is also defined in %s' % (number, seen[number])
            ))
        elif number != expected:
            issues.append(Issue(
                path, line, 'chapter-numbering',
                'expected chapter %s, found chapter %s' % (expected, number)
            ))
        seen.setdefault(number, path)
        expected = max(expected, number + 1)

    return issues
