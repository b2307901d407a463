import io
import logging
import re

from lazyutils import lazy

from bookcheck.exceptions import DocumentError

logger = logging.getLogger('bookcheck')

CHAPTER_PATTERN = r'^chapter\s+(?P<number>\d+)\s*:\s*(?P<title>\S.*)$'
SKIP_PRAGMA = re.compile(r'^\s*<!--\s*bookcheck:\s*skip\s*-->\s*$')

_fence_open = re.compile(r'^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$')
_atx_heading = re.compile(r'^ {0,3}(?P<level>#{1,6})(?:[ \t]+(?P<title>.*?))?'
                          r'(?:[ \t]+#+)?[ \t]*$')
_setext_underline = re.compile(r'^ {0,3}(?P<char>=+|-+)[ \t]*$')


class Heading:
    """
    A Markdown heading found outside code blocks.
    """

    def __init__(self, level, title, line):
        self.level = level
        self.title = title
        self.line = line

    def __repr__(self):
        return 'Heading(%r, %r, line=%s)' % (self.level, self.title, self.line)

    def __eq__(self, other):
        if isinstance(other, Heading):
            return (self.level, self.title, self.line) == \
                   (other.level, other.title, other.line)
        return NotImplemented


class CodeBlock:
    """
    A fenced code block.

    Attributes:
        info (str):
            Raw info string written after the opening fence.
        lang (str or None):
            Lowercase language tag taken from the info string.
        source (str):
            Contents of the block.
        line (int):
            Line of the opening fence (1-based).
        end_line (int):
            Line of the closing fence or the last line of the document for
            unclosed blocks.
        is_closed (bool):
            False if the document ends before the block is closed.
        fence (str):
            The opening fence string (e.g. "```").
        skip (bool):
            True if the block is marked with the skip pragma.
    """

    def __init__(self, info, source, line, end_line=None, is_closed=True,
                 fence='```', skip=False):
        self.info = info
        self.lang = language_tag(info)
        self.source = source
        self.line = line
        self.end_line = line if end_line is None else end_line
        self.is_closed = is_closed
        self.fence = fence
        self.skip = skip

    def __repr__(self):
        return 'CodeBlock(%r, line=%s)' % (self.lang, self.line)

    @property
    def first_line(self):
        """
        Document line holding the first line of the block source.
        """

        return self.line + 1


class Document:
    """
    A parsed chapter file.
    """

    def __init__(self, text, path=None, headings=(), blocks=()):
        self.text = text
        self.path = path
        self.headings = list(headings)
        self.blocks = list(blocks)

    def __repr__(self):
        return '<Document %s: %s headings, %s blocks>' % (
            self.path or '<string>', len(self.headings), len(self.blocks)
        )

    @property
    def name(self):
        return self.path or '<string>'

    @lazy
    def title(self):
        for heading in self.headings:
            if heading.level == 1:
                return heading
        return None

    def chapter_number(self, pattern=CHAPTER_PATTERN):
        """
        Return the chapter number from the document title or None if the title
        does not match the chapter heading pattern.
        """

        pattern = compile_pattern(pattern)
        if self.title is None:
            return None
        m = pattern.match(self.title.title)
        if m is None:
            return None
        if 'number' in pattern.groupindex:
            return int(m.group('number'))
        return int(m.group(1))

    def blocks_for(self, lang):
        """
        Return all blocks with the given language tag.
        """

        return [block for block in self.blocks if block.lang == lang]


def language_tag(info):
    """
    Extract the language tag from a fence info string.

    >>> language_tag(' Python linenums="1"')
    'python'
    >>> language_tag('{.ruby}')
    'ruby'
    """

    words = info.strip().split()
    if not words:
        return None
    tag = words[0].strip('{}').lstrip('.')
    return tag.lower() or None


def parse(text, path=None):
    """
    Parse a string of Markdown and return a :class:`Document`.
    """

    if not isinstance(text, str):
        raise DocumentError('expected a string, got %s' % type(text).__name__)

    lines = text.splitlines()
    headings = []
    blocks = []
    paragraph = None
    pending_skip = False
    idx = 0

    while idx < len(lines):
        line = lines[idx]
        lineno = idx + 1
        m = _fence_open.match(line)
        if m and not (m.group('fence')[0] == '`' and '`' in m.group('info')):
            block, idx = _read_block(lines, idx, m, pending_skip)
            blocks.append(block)
            paragraph = None
            pending_skip = False
            continue

        if SKIP_PRAGMA.match(line):
            pending_skip = True
            paragraph = None
        elif not line.strip():
            paragraph = None
        else:
            pending_skip = False
            m = _atx_heading.match(line)
            underline = _setext_underline.match(line)
            if m:
                title = (m.group('title') or '').strip()
                headings.append(Heading(len(m.group('level')), title, lineno))
                paragraph = None
            elif underline and paragraph is not None:
                level = 1 if underline.group('char')[0] == '=' else 2
                text_line, start = paragraph
                headings.append(Heading(level, text_line.strip(), start))
                paragraph = None
            elif underline:
                # thematic break
                paragraph = None
            elif paragraph is None:
                paragraph = (line.strip(), lineno)
            else:
                paragraph = (paragraph[0] + ' ' + line.strip(), paragraph[1])
        idx += 1

    logger.debug('parsed %s: %s headings and %s code blocks' %
                 (path or '<string>', len(headings), len(blocks)))
    return Document(text, path, headings, blocks)


def _read_block(lines, idx, match, skip):
    indent = len(match.group('indent'))
    fence = match.group('fence')
    start = idx + 1
    closing = re.compile(r'^ {0,3}%s{%s,}[ \t]*$' %
                         (re.escape(fence[0]), len(fence)))

    content = []
    idx += 1
    while idx < len(lines):
        line = lines[idx]
        if closing.match(line):
            block = CodeBlock(match.group('info'), _join(content), start,
                              end_line=idx + 1, fence=fence, skip=skip)
            return block, idx + 1
        content.append(_dedent(line, indent))
        idx += 1

    block = CodeBlock(match.group('info'), _join(content), start,
                      end_line=max(len(lines), start), is_closed=False,
                      fence=fence, skip=skip)
    return block, idx


def _dedent(line, indent):
    removed = 0
    while removed < indent and line[removed:removed + 1] == ' ':
        removed += 1
    return line[removed:]


def _join(lines):
    if not lines:
        return ''
    return '\n'.join(lines) + '\n'


def parse_file(path, encoding='utf8'):
    """
    Read and parse the Markdown file at the given path.
    """

    with io.open(path, encoding=encoding) as F:
        text = F.read()
    return parse(text, path)


def compile_pattern(pattern=CHAPTER_PATTERN):
    """
    Compile a chapter heading pattern (case-insensitive).

    The pattern must have a group named "number" or at least one group. Raise
    ValueError for invalid patterns.
    """

    if isinstance(pattern, str):
        try:
            pattern = re.compile(pattern, re.IGNORECASE)
        except re.error as ex:
            raise ValueError('invalid chapter pattern %r: %s' % (pattern, ex))
    if 'number' not in pattern.groupindex and pattern.groups < 1:
        raise ValueError(
            'chapter pattern %r must define a group named "number"' %
            pattern.pattern
        )
    return pattern
