import logging
import os
import shutil
import tempfile
import time

from bookcheck.exceptions import BuildError

logger = logging.getLogger('bookcheck')


class BuildManager:
    """
    Stores information about a snippet build.

    Args:
        source (str):
            Source code of the snippet.
        path (str):
            Path of the document (or source file) the snippet came from.
        line (int):
            Document line of the first source line. Line numbers in error
            messages are relative to it.
    """

    language = None
    is_executable = True

    def __init__(self, source, path=None, line=1):
        self.source = source
        self.path = path
        self.line = line
        self.is_built = False
        self.is_closed = False
        self.has_successful_execution = False
        self.build_duration = 0
        self.execution_duration = 0

    @property
    def line_offset(self):
        """
        Number to add to snippet line numbers to obtain document lines.
        """

        return self.line - 1

    def log(self, level, message):
        """
        Log message for the given log level.
        """

        getattr(logger, level)(message)

    def build(self, _log=True):
        """
        Prepares build for the given context.
        """

        raise NotImplementedError

    def _build_start(self, _log=True):
        """
        Must be called by .build() in the beginning of the build process.
        """

        self.__t0 = time.time()
        try:
            self.syntax_check()
        except SyntaxError as ex:
            self.log('debug', '%s: invalid syntax!' % self.__class__.__name__)
            raise BuildError(str(ex))

    def _build_end(self, _log=True):
        """
        Must be called by .build() in the end of the build process.
        """

        self.is_built = True
        self.build_duration = time.time() - self.__t0
        if _log:
            log_is_built(self)

    def close(self):
        """
        Explicitly deallocate all resources allocated by the BuildManager.
        """

        self.is_closed = True

    def syntax_check(self):
        """
        Raise a SyntaxError if source code syntax is invalid.
        """

        raise NotImplementedError


class IntegratedBuildManager(BuildManager):
    """
    Build context for Python or other languages that can be integrated into
    the main interpreter.
    """

    def build(self, _log=True):
        self._build_start(_log)
        self._build_end(_log)


class ExternalProgramBuildManager(BuildManager):
    """
    Build context for programs that run in external interpreters. This build
    context prepares a temporary folder to store all necessary files.
    """

    build_path = None
    source_extension = None

    def build(self, _log=True):
        self._build_start(_log)
        self._build_run()
        self._build_end(_log)

    def _build_run(self):
        if not self.build_path:
            self.build_path = self.build_tempdir()
        self.prepare_files()

    def close(self):
        if self.build_path is not None:
            shutil.rmtree(self.build_path, ignore_errors=True)
            self.log('debug', 'removed build path %r' % self.build_path)
            self.build_path = None
        super().close()

    def build_tempdir(self):
        """
        Creates a temporary directory for storing files.
        """

        temp_dir = tempfile.mkdtemp(prefix='bookcheck-')

        self.build_path = temp_dir
        self.log('debug', 'temporary build path at %r' % temp_dir)
        return temp_dir

    def write(self, path, data):
        """
        Write contents of the "data" string into the absolute "path".
        """

        if self.build_path is None:
            raise RuntimeError('must create temporary directory first!')

        # Path must be inside the working directory. We block accidental writes
        # on other directories
        if not path.startswith(self.build_path + os.path.sep):
            msg = 'cannot write %r: outside build directory %r'
            msg = msg % (path, self.build_path)
            raise PermissionError(msg)

        with open(path, 'w', encoding='utf8') as F:
            F.write(data)

        self.log('debug', '%r successfully created' % path)

    def prepare_files(self):
        """
        Saves all necessary files to the temporary directory.
        """

        filename = self.get_source_filename(absolute=True)
        if not os.path.exists(filename):
            self.write(filename, self.source)
        else:
            raise RuntimeError('file already exist: %r' % filename)

    def get_source_extension(self):
        """
        Return the source file default extension.
        """

        if self.source_extension is None:
            raise NotImplementedError(
                'Subclasses must either define the attribute source_extension '
                'or override the .get_source_extension() method.'
            )
        return self.source_extension

    def get_source_filename(self, absolute=False):
        """
        Return the default source file name.
        """

        ext = self.get_source_extension()
        if not ext:
            name = 'main'
        else:
            name = 'main.' + ext.lstrip('.')
        if absolute:
            return os.path.join(self.build_path, name)
        else:
            return name


class InterpretedLanguageBuildManager(ExternalProgramBuildManager):
    """
    Basic support for scripting languages and interpreter-like execution.
    """


class CheckOnlyBuildManager(IntegratedBuildManager):
    """
    Build manager for snippet formats that can be checked but not executed,
    such as interactive console sessions.
    """

    is_executable = False


def log_is_built(manager):
    manager.log('info', 'successfully built (%.3f sec)' %
                manager.build_duration)
