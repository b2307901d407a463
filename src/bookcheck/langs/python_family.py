import doctest
import sys

from bookcheck.build_manager import IntegratedBuildManager, \
    InterpretedLanguageBuildManager, CheckOnlyBuildManager
from bookcheck.execution_manager import IntegratedExecutionManager, \
    InterpretedLanguageExecutionManager, NullExecutionManager
from bookcheck.util import format_syntax_error


# Python 3.x support
class PythonBuildManager(IntegratedBuildManager):
    """
    Integrated build manager for Python 3.x.
    """

    language = 'python'

    def syntax_check(self):
        python3_syntax_check(self.source, offset=self.line_offset)


class PythonExecutionManager(IntegratedExecutionManager):
    """
    Execution manager for Python source.
    """


# Python 3.x support in an isolated interpreter. Useful for snippets that
# change global interpreter state.
class PythonScriptBuildManager(InterpretedLanguageBuildManager):
    """
    Python 3.x builder that executes code in a separate interpreter.
    """

    source_extension = '.py'
    language = 'python-script'

    def syntax_check(self):
        python3_syntax_check(self.source, offset=self.line_offset)


class PythonScriptExecutionManager(InterpretedLanguageExecutionManager):
    """
    Python 3.x execution in a separate interpreter.
    """

    interpreter_command = sys.executable or 'python3'


# Interactive sessions
class PythonConsoleBuildManager(CheckOnlyBuildManager):
    """
    Checks interactive sessions written with ">>>" and "..." prompts.

    Only the statements typed after the prompts are checked. The displayed
    results are ignored.
    """

    language = 'pycon'

    def syntax_check(self):
        try:
            examples = doctest.DocTestParser().get_examples(self.source)
        except ValueError as ex:
            raise SyntaxError(str(ex))

        for example in examples:
            python3_syntax_check(example.source, mode='single',
                                 offset=self.line_offset + example.lineno)


class PythonConsoleExecutionManager(NullExecutionManager):
    """
    Console sessions are not executed.
    """


# Utility functions
def python3_syntax_check(source, mode='exec', offset=0):
    """
    Checks if string of source code is valid Python 3 syntax.

    Line numbers in the error message are shifted by offset.
    """

    try:
        compile(source, 'main.py', mode)
    except SyntaxError as ex:
        raise SyntaxError(format_syntax_error(ex, offset))
