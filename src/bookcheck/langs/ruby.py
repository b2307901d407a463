import os
import re
import shutil
import subprocess
import tempfile

from bookcheck.build_manager import InterpretedLanguageBuildManager, \
    CheckOnlyBuildManager
from bookcheck.exceptions import LanguageUnavailableError
from bookcheck.execution_manager import InterpretedLanguageExecutionManager, \
    NullExecutionManager

_location = re.compile(r'(?m)^(?:\S+: )?[^\s:]*main\.rb:(\d+):\s*')
_annotation = re.compile(r'^\s*\|\s*\^~*\s+(?P<text>\S.*)$')
_irb_prompt = re.compile(r'^(?:irb\([^)]*\):\d+:\d+[>*"\'] ?|irb[>*] ?|>> ?|\?> ?)')


class RubyBuildManager(InterpretedLanguageBuildManager):
    """
    Ruby builder.
    """

    source_extension = '.rb'
    language = 'ruby'

    def syntax_check(self):
        """
        Checks code for syntax errors with ``ruby -c``.
        """

        ruby_syntax_check(self.source, offset=self.line_offset)


class RubyExecutionManager(InterpretedLanguageExecutionManager):
    """
    Executes Ruby code.
    """

    interpreter_command = 'ruby'


class RubyConsoleBuildManager(CheckOnlyBuildManager):
    """
    Checks irb sessions.

    Lines typed after a prompt are kept, results ("=> ...") and printed output
    are blanked so line numbers still match the document.
    """

    language = 'irb'

    def syntax_check(self):
        ruby_syntax_check(strip_irb_prompts(self.source),
                          offset=self.line_offset)


class RubyConsoleExecutionManager(NullExecutionManager):
    """
    irb sessions are not executed.
    """


def strip_irb_prompts(source):
    """
    Return the Ruby code typed in an irb session.

    >>> strip_irb_prompts('>> 1 + 1\\n=> 2\\n')
    '1 + 1\\n\\n'
    """

    lines = []
    for line in source.splitlines():
        m = _irb_prompt.match(line)
        if m:
            lines.append(line[m.end():])
        else:
            lines.append('')
    return ''.join(line + '\n' for line in lines)


def ruby_syntax_check(source, offset=0, encoding='utf8'):
    """
    Check syntax of Ruby code.

    Raises a SyntaxError on error and LanguageUnavailableError if no ruby
    interpreter is installed. Do not return anything.
    """

    ruby = shutil.which('ruby')
    if ruby is None:
        raise LanguageUnavailableError('ruby executable not found in PATH')

    tempdir = tempfile.mkdtemp(prefix='bookcheck-')
    path = os.path.join(tempdir, 'main.rb')
    try:
        with open(path, 'w', encoding=encoding) as F:
            F.write(source)
        cmd = [ruby, '-c', 'main.rb']

        try:
            subprocess.check_output(cmd, stderr=subprocess.STDOUT,
                                    cwd=tempdir, timeout=10)
            out = None
        except subprocess.CalledProcessError as ex:
            out = ex.output.decode(encoding, 'replace') or 'syntax error'
        except subprocess.TimeoutExpired:
            out = 'syntax check is taking too long'
    finally:
        shutil.rmtree(tempdir, ignore_errors=True)

    if out is not None:
        message = remap_lines(out.strip(), offset)
        raise SyntaxError(first_diagnostic(message))


def remap_lines(message, offset):
    """
    Replace "main.rb:N:" locations in ruby messages by document lines.
    """

    def replace(m):
        return 'line %s: ' % (int(m.group(1)) + offset)

    return _location.sub(replace, message)


def first_diagnostic(message):
    """
    Reduce a multi-line ruby diagnostic to a single line.

    Newer rubies print source excerpts with the error description under a
    caret, which is appended to the first line.
    """

    lines = message.strip().splitlines()
    if not lines:
        return 'syntax error'
    for line in lines[1:]:
        m = _annotation.match(line)
        if m:
            return '%s: %s' % (lines[0], m.group('text'))
    return lines[0]
