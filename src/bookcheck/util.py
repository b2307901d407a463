import builtins
import contextlib
import os
import re
import traceback


#
# Builtins
#
@contextlib.contextmanager
def patched_builtins(dic=None, **kwargs):
    """
    Context manager that replaces builtin functions during the with block and
    restores the original builtins when it exits.
    """

    dic = dict(dic or {})
    dic.update(kwargs)
    saved = {k: getattr(builtins, k) for k in dic if hasattr(builtins, k)}
    for k, v in dic.items():
        setattr(builtins, k, v)

    try:
        yield
    finally:
        for k in dic:
            if k in saved:
                setattr(builtins, k, saved[k])
            elif hasattr(builtins, k):
                delattr(builtins, k)


#
# Strings and paths
#
def natural_sort_key(path):
    """
    Sort key that orders embedded numbers numerically, so "ch2.md" comes before
    "ch10.md".
    """

    parts = re.split(r'(\d+)', os.path.normcase(path))
    return [int(part) if part.isdigit() else part for part in parts]


def format_traceback(ex, source, filename='main.py', offset=0):
    """
    Creates a error message string from an exception with a __traceback__
    value. Only frames that belong to the snippet are kept.

    Args:
        ex:
            The exception instance.
        source (str):
            Source code of the snippet.
        filename (str):
            The filename passed to compile().
        offset (int):
            Number added to line numbers so they refer to document lines.
    """

    ex_name = type(ex).__name__
    messages = []
    code_lines = source.splitlines()
    tb = ex.__traceback__

    for frame in traceback.extract_tb(tb):
        if frame.filename != filename:
            continue
        lineno = frame.lineno
        if 0 < lineno <= len(code_lines):
            text = code_lines[lineno - 1].strip()
        else:
            text = frame.line
        messages.append((filename, lineno + offset, frame.name, text))

    messages = traceback.format_list(messages)
    messages.insert(0, 'Traceback (most recent call last):\n')
    messages.append('%s: %s' % (ex_name, ex))
    return ''.join(messages)


def format_syntax_error(ex, offset=0):
    """
    Format a SyntaxError raised by compile() as a single line message with its
    line number shifted by offset.
    """

    msg = ex.msg if getattr(ex, 'msg', None) else str(ex)
    if ex.lineno is None:
        return msg
    return 'line %s: %s' % (ex.lineno + offset, msg)
