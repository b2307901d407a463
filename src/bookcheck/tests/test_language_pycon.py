import pytest

from bookcheck import functions, registry
from bookcheck.exceptions import BuildError

session = '''\
>>> xs = [1, 2, 3]
>>> [x * 2 for x in xs]
[2, 4, 6]
>>> for x in xs:
...     print(x)
1
2
3
'''


def test_valid_session():
    manager = registry.build_manager('pycon', session)
    manager.syntax_check()
    manager.build()
    assert manager.is_built


def test_invalid_session_reports_document_line():
    src = '>>> x = 1\n>>> x +\n'
    manager = registry.build_manager('pycon', src, line=30)
    with pytest.raises(BuildError) as exc:
        manager.build()
    assert str(exc.value).startswith('line 31:')


def test_session_alias_in_chapter():
    report = functions.check_source('```doctest\n>>> 1 +\n```\n')
    assert report.codes() == ['syntax-error']
    assert report.issues[0].line == 2


def test_prose_without_prompts_is_valid():
    manager = registry.build_manager('pycon', 'just some text\n')
    manager.syntax_check()


def test_sessions_cannot_be_executed():
    with pytest.raises(ValueError):
        functions.run(session, 'pycon')
