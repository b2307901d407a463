import logging
import os

from bookcheck.registry_class import registry
from bookcheck.document import parse, parse_file, CHAPTER_PATTERN
from bookcheck.exceptions import BuildError
from bookcheck.execution_manager import ExecutionResult
from bookcheck.lint import Report, check_document, check_numbering
from bookcheck.util import natural_sort_key

logger = logging.getLogger('bookcheck')

MARKDOWN_EXTENSIONS = ('.md', '.markdown')


def collect(paths):
    """
    Return the list of Markdown files from the given files and directories.

    Directories are walked recursively and their files are returned in natural
    order. Explicitly named files are kept in the given order.
    """

    if isinstance(paths, str):
        paths = [paths]

    result = []
    for path in paths:
        if os.path.isdir(path):
            found = []
            for dirpath, dirnames, filenames in os.walk(path):
                dirnames[:] = [x for x in dirnames if not x.startswith('.')]
                found.extend(
                    os.path.join(dirpath, name) for name in filenames
                    if name.lower().endswith(MARKDOWN_EXTENSIONS)
                )
            result.extend(sorted(found, key=natural_sort_key))
        elif os.path.exists(path):
            result.append(path)
        else:
            raise FileNotFoundError('no such file or directory: %r' % path)
    return result


def check(paths, *, languages=None, require_language=False, numbering=True,
          pattern=None):
    """
    Check all chapters in the given paths.

    Args:
        paths (str or list):
            Markdown files or directories holding them.
        languages (list):
            Restrict syntax checking to these languages.
        require_language (bool):
            Warn about fenced blocks without a language tag.
        numbering (bool):
            Check that chapters are numbered 1, 2, ..., N in file order.
        pattern (str):
            Regular expression for chapter headings. It must define a group
            named "number". Defaults to "Chapter N: Title".

    Returns:
        A :class:`bookcheck.Report` instance.
    """

    documents = [parse_file(path) for path in collect(paths)]
    logger.info('checking %s document(s)' % len(documents))
    return _check_documents(documents, languages=languages,
                            require_language=require_language,
                            numbering=numbering, pattern=pattern)


def check_source(text, path=None, *, languages=None, require_language=False,
                 numbering=False, pattern=None):
    """
    Check a single chapter given as a string.

    Chapter numbering is not checked by default since a single chapter has no
    position in the book.
    """

    document = parse(text, path)
    return _check_documents([document], languages=languages,
                            require_language=require_language,
                            numbering=numbering, pattern=pattern)


def _check_documents(documents, languages, require_language, numbering,
                     pattern):
    issues = []
    for document in documents:
        issues.extend(check_document(document, languages=languages,
                                     require_language=require_language))
    if numbering:
        issues.extend(check_numbering(documents, pattern or CHAPTER_PATTERN))
    return Report(issues, documents)


def snippets(paths, lang=None):
    """
    Iterate over (document, block) pairs for all code blocks in the given
    paths.

    If lang is given, only blocks whose tag maps to the same language are
    returned.
    """

    for path in collect(paths):
        document = parse_file(path)
        for block in document.blocks:
            if _has_language(block, lang):
                yield document, block


def run(source, lang='python', inputs=(), *, timeout=None, raises=False,
        path=None, line=1):
    """
    Build and run a snippet of code.

    Args:
        source (str or file)
            The source code of the snippet.
        lang (str)
            Language name or alias. If None, it is inferred from path.
        inputs (sequence)
            A sequence of input strings fed to the snippet.
        timeout (float)
            A time limit for the execution (in seconds). If this attribute is
            not given, the snippet will run without any timeout.
        raises (bool)
            If True, raise a BuildError if the build process fails. The default
            behavior is to return an ExecutionResult with status 'build'.
        path (str)
            The file path for the input string or file object.
        line (int)
            Document line of the first source line.

    Returns:
        An :class:`ExecutionResult` instance.
    """

    if timeout is not None and timeout <= 0:
        raise ValueError('timeout must be positive, got: %s' % timeout)

    build_manager = registry.build_manager_from_path(lang, source, path,
                                                     line=line)
    if not build_manager.is_executable:
        raise ValueError('%s snippets cannot be executed' %
                         build_manager.language)

    try:
        build_manager.build()
    except BuildError as ex:
        if raises:
            raise
        return ExecutionResult.build(str(ex))

    try:
        ctrl = registry.execution_manager(build_manager.language,
                                          build_manager, inputs)
        result = ctrl.run(timeout)
    finally:
        build_manager.close()

    build_manager.log('info', 'executed snippet in %.3f sec' %
                      build_manager.execution_duration)
    return result


def extract(paths, dest, lang=None):
    """
    Write code blocks to individual files.

    Each block is saved as ``dest/<chapter>/<nn>-line<L>.<ext>``, where nn is
    the block position in the chapter and L its line. The chapter folder is
    the chapter path relative to the given directory, without extension, so
    "book/part1/index.md" becomes "part1/index". Blocks of languages without
    a file extension are saved with the ".txt" extension.

    Raises ValueError if two chapters would be written to the same folder.

    Returns:
        The list of written paths.
    """

    if isinstance(paths, str):
        paths = [paths]

    written = []
    folders = {}
    for root in paths:
        if os.path.isdir(root):
            base = root
        else:
            base = os.path.dirname(root) or os.curdir
        for path in collect(root):
            chapter = os.path.splitext(os.path.relpath(path, base))[0]
            folder = os.path.join(dest, chapter)
            if folders.setdefault(folder, path) != path:
                raise ValueError('%r and %r would both be extracted to %r' %
                                 (folders[folder], path, folder))
            written.extend(_extract_document(parse_file(path), folder, lang))

    logger.info('extracted %s snippet(s) to %s' % (len(written), dest))
    return written


def _extract_document(document, folder, lang):
    written = []
    idx = 0
    for block in document.blocks:
        if not block.is_closed or not _has_language(block, lang):
            continue
        idx += 1
        os.makedirs(folder, exist_ok=True)
        name = '%02d-line%s%s' % (idx, block.line, extension_for(block.lang))
        filename = os.path.join(folder, name)
        with open(filename, 'w', encoding='utf8') as F:
            F.write(block.source)
        written.append(filename)
    return written


def _has_language(block, lang):
    if lang is None:
        return True
    lang = registry.language_from_tag(lang) or lang
    return registry.language_from_tag(block.lang) == lang


def extension_for(tag):
    """
    Return the file extension used for blocks with the given tag.
    """

    lang = registry.language_from_tag(tag)
    if lang is None:
        return '.txt'
    manager_class = registry.build_manager_class(lang)
    return (registry.extension_for(lang) or
            getattr(manager_class, 'source_extension', None) or '.txt')
