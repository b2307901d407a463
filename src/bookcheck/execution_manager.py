import functools
import io
import logging
import multiprocessing
import queue
import subprocess
import sys
import time

from lazyutils import delegate_to

from bookcheck.exceptions import MissingInputError
from bookcheck.util import patched_builtins, format_traceback

logger = logging.getLogger('bookcheck')


class ExecutionResult:
    """
    Outcome of running a snippet.

    Attributes:
        status (str):
            One of 'ok', 'runtime', 'timeout' or 'build'.
        output (str):
            Everything the snippet printed to stdout.
        error_message (str or None):
            Traceback or error output for unsuccessful runs.
        duration (float):
            Execution time in seconds.
    """

    statuses = ('ok', 'runtime', 'timeout', 'build')

    def __init__(self, status='ok', output='', error_message=None,
                 duration=0.0):
        if status not in self.statuses:
            raise ValueError('invalid status: %r' % status)
        self.status = status
        self.output = output
        self.error_message = error_message
        self.duration = duration

    def __repr__(self):
        return 'ExecutionResult(%r, output=%r)' % (self.status, self.output)

    @property
    def is_ok(self):
        return self.status == 'ok'

    @property
    def is_error(self):
        return self.status != 'ok'

    @classmethod
    def build(cls, error_message):
        return cls('build', error_message=error_message)

    @classmethod
    def runtime(cls, output='', error_message=None):
        return cls('runtime', output, error_message)

    @classmethod
    def timeout(cls, output='', error_message=None):
        return cls('timeout', output, error_message)

    def as_text(self):
        """
        Human readable rendering of the result.
        """

        lines = []
        if self.output:
            lines.append(self.output.rstrip('\n'))
        if self.is_error:
            lines.append('[%s error]' % self.status)
            if self.error_message:
                lines.append(self.error_message.rstrip('\n'))
        return '\n'.join(lines)

    def to_json(self):
        return {
            'status': self.status,
            'output': self.output,
            'error_message': self.error_message,
            'duration': self.duration,
        }


class ExecutionManager:
    """
    Controls execution of a single snippet.

    Args:
        build_manager:
            The BuildManager instance associated with this snippet.
        inputs:
            A list of input strings.
    """

    source = delegate_to('build_manager')
    line_offset = delegate_to('build_manager')

    def __init__(self, build_manager, inputs=()):
        self.build_manager = build_manager
        self.inputs = tuple(map(str, inputs or ()))
        self.is_started = False
        self.is_closed = False
        self.duration = 0
        self.output = []

    def log(self, level, message):
        """
        Log message for the given log level.
        """

        getattr(logger, level)(message)

    def get_output(self):
        return ''.join(self.output)

    def run(self, timeout=None):
        """
        Run snippet and return an :class:`ExecutionResult`.
        """

        if self.is_closed or self.build_manager.is_closed:
            raise RuntimeError(
                'Snippet already executed. Cannot run it again.'
            )
        if self.is_started:
            raise RuntimeError(
                'Snippet already started execution. Please create another '
                'ExecutionManager instance.'
            )
        t0 = self.start()
        try:
            result = self.interact(timeout)
        except TimeoutError:
            msg = 'maximum execution time exceeded: %s sec' % timeout
            result = ExecutionResult.timeout(self.get_output(), msg)

        t1 = self.end()
        self.duration = result.duration = t1 - t0
        self.build_manager.execution_duration += self.duration
        return result

    def interact(self, timeout=None):
        """
        Run the snippet feeding all input strings.

        Return an ExecutionResult instance.
        """

        raise NotImplementedError

    def start(self):
        """
        Executed to start snippet execution.
        """

        if not self.build_manager.is_built:
            self.build_manager.build()
        if not self.build_manager.is_executable:
            raise RuntimeError(
                '%s snippets cannot be executed' % self.build_manager.language
            )
        if not self.build_manager.has_successful_execution:
            self.log('info', 'executing snippet with %s inputs' %
                     len(self.inputs))
        self.is_started = True
        return time.time()

    def end(self):
        """
        Executed after execution ends. May be necessary to clean state.
        """

        self.is_closed = True
        if not self.build_manager.has_successful_execution:
            self.log('debug', 'first run successful!')
        self.build_manager.has_successful_execution = True
        return time.time()


class IntegratedExecutionManager(ExecutionManager):
    """
    Execution manager for Python snippets that run inside the Python
    interpreter.
    """

    __print = staticmethod(print)
    __input = staticmethod(input)
    filename = 'main.py'

    def wrapped_exec(self):
        globals_dic = {'__name__': '__main__'}
        try:
            with patched_builtins(self.builtins()):
                self.exec(globals_dic)
        except SystemExit as ex:
            return exit_result(ex, self.get_output())
        except Exception as ex:
            error = format_traceback(ex, self.source, self.filename,
                                     self.line_offset)
            return ExecutionResult.runtime(self.get_output(), error)
        else:
            return ExecutionResult('ok', self.get_output())

    def interact(self, timeout=None):
        if timeout is None:
            return self.wrapped_exec()

        # Timed runs execute in a child process that is terminated on timeout.
        # The child sends ('output', chunk) messages and a final
        # ('result', result) message.
        storage = multiprocessing.Queue()
        process = multiprocessing.Process(
            target=integrated_manager_interact,
            args=(self, storage),
            daemon=True,
        )
        process.start()
        deadline = time.time() + timeout
        try:
            while True:
                remaining = deadline - time.time()
                if remaining <= 0:
                    raise queue.Empty
                kind, data = storage.get(timeout=remaining)
                if kind == 'result':
                    break
                self.output.append(data)
        except queue.Empty:
            if process.is_alive():
                process.terminate()
                process.join()
                raise TimeoutError
            process.join()
            return ExecutionResult.runtime(
                self.get_output(),
                error_message='process exited with status %s' %
                              process.exitcode
            )
        process.join()
        return data

    def exec(self, globals):
        """
        Execute code with the given globals dictionary.
        """

        code = compile(self.source, self.filename, 'exec')
        exec(code, globals)

    def builtins(self):
        """
        Return a dictionary with builtin functions replacements.

        The default implementation just replaces the builtin print() and input()
        functions.
        """
        consumed_inputs = list(reversed(self.inputs))

        @functools.wraps(self.__print)
        def print(*args, sep=' ', end='\n', file=None, flush=False):
            if not (file is None or file is sys.stdout):
                self.__print(*args, sep=sep, end=end, file=file, flush=flush)
            else:
                file = io.StringIO()
                self.__print(*args, sep=sep, end=end, file=file, flush=flush)
                self.output.append(file.getvalue())

        @functools.wraps(self.__input)
        def input(prompt=None):
            if prompt is not None:
                print(prompt, end='')
            if consumed_inputs:
                result = consumed_inputs.pop()
                self.output.append(result + '\n')
                return result
            else:
                raise MissingInputError('not enough inputs')

        return {'print': print, 'input': input}


class SubprocessExecutionManager(ExecutionManager):
    """
    Execution manager for languages executed outside the main Python
    interpreter.
    """

    def interact(self, timeout=None):
        shell_args = self.get_shell_args()
        self.log('debug', 'running %s' % ' '.join(shell_args))
        stdin = ''.join(x + '\n' for x in self.inputs)

        try:
            process = subprocess.run(
                shell_args,
                input=stdin,
                cwd=self.build_manager.build_path,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                universal_newlines=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as ex:
            output = ex.stdout or ''
            if isinstance(output, bytes):
                output = output.decode('utf8', 'replace')
            self.output.append(output)
            raise TimeoutError('timeout after %s sec' % timeout)
        except FileNotFoundError as ex:
            return ExecutionResult.runtime(
                error_message='cannot execute %r: %s' % (shell_args[0], ex)
            )

        self.output.append(process.stdout)
        if process.returncode == 0:
            return ExecutionResult('ok', process.stdout)
        error = process.stderr or \
            'exited with status %s' % process.returncode
        return ExecutionResult.runtime(process.stdout, error)

    def get_shell_args(self):
        """
        Return the arguments passed to the executable object.
        """

        raise NotImplementedError


class InterpretedLanguageExecutionManager(SubprocessExecutionManager):
    """
    Base execution manager for interpreted languages.

    It assumes the main interpreter will just execute the source file.
    """

    interpreter_command = None

    def get_shell_args(self):
        """
        Return the command to execute the interpreter.
        """

        if self.interpreter_command is None:
            raise NotImplementedError(
                'Subclasses must either supply the .interpreter_command '
                'string attribute or override the get_shell_args() method.'
            )

        source_name = self.build_manager.get_source_filename()
        return [self.interpreter_command, source_name]


class NullExecutionManager(ExecutionManager):
    """
    Execution manager for snippets that can only be checked.
    """

    def interact(self, timeout=None):
        raise RuntimeError('snippet cannot be executed')


class QueueOutput(list):
    """
    Output list that also sends each chunk to a multiprocessing queue, so the
    parent process keeps what a timed out child printed.
    """

    def __init__(self, storage, data=()):
        super().__init__(data)
        self.storage = storage

    def append(self, data):
        super().append(data)
        self.storage.put(('output', data))


# Interact with integrated manager as the target function in a subprocess
# execution.
def integrated_manager_interact(exc_manager, storage):
    """
    Run the execution manager snippet and put the result in storage.
    """

    exc_manager.output = QueueOutput(storage)
    storage.put(('result', exc_manager.wrapped_exec()))


def exit_result(ex, output=''):
    """
    Convert a SystemExit raised by a snippet into an ExecutionResult.

    Status codes 0 and None are successful runs, like in the interpreter.
    """

    code = ex.code
    if code is None or code == 0:
        return ExecutionResult('ok', output)
    if isinstance(code, int):
        return ExecutionResult.runtime(output,
                                       'exited with status %s' % code)
    return ExecutionResult.runtime(output, str(code))
