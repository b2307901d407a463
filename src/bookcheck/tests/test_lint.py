import json

import pytest

from bookcheck import parse
from bookcheck.lint import Issue, Report, check_document, check_numbering


def codes(issues):
    return [x.code for x in issues]


def test_unclosed_fence_is_an_error():
    doc = parse('# T\n```python\nx = 1\n', 'ch.md')
    issue, = check_document(doc)
    assert issue.code == 'unclosed-fence'
    assert issue.level == 'error'
    assert issue.line == 2
    assert str(issue) == \
        "ch.md:2: error [unclosed-fence] code block opened with '```' " \
        "is never closed"


def test_missing_language():
    doc = parse('```\nfoo\n```\n')
    assert check_document(doc) == []
    issue, = check_document(doc, require_language=True)
    assert issue.code == 'missing-language'
    assert issue.level == 'warning'


def test_unknown_language_is_informative():
    doc = parse('```haskell\nmain = print 1\n```\n')
    issue, = check_document(doc)
    assert issue.code == 'unknown-language'
    assert issue.level == 'info'


def test_syntax_error_line_points_to_document():
    doc = parse('# T\n\n```python\nx = 1\nif x\n    pass\n```\n')
    issue, = check_document(doc)
    assert issue.code == 'syntax-error'
    assert issue.line == 5
    assert issue.message.startswith('python: line 5:')


def test_aliases_are_checked():
    doc = parse('```py3\nx y\n```\n')
    assert codes(check_document(doc)) == ['syntax-error']


def test_skip_pragma():
    doc = parse('<!-- bookcheck: skip -->\n```python\nx y\n```\n')
    issue, = check_document(doc)
    assert issue.code == 'skipped'
    assert issue.level == 'info'


def test_language_selection():
    doc = parse('```python\nx y\n```\n\n```pycon\n>>> x y\n```\n')
    issues = check_document(doc, languages=['py'])
    assert codes(issues) == ['syntax-error', 'skipped']
    assert issues[0].line == 2


def test_numbering_ok():
    docs = [parse('# Chapter %s: Title\n' % n, 'ch%s.md' % n)
            for n in (1, 2, 3)]
    assert check_numbering(docs) == []


def test_numbering_gap():
    docs = [parse('# Chapter %s: Title\n' % n, 'ch%s.md' % n)
            for n in (1, 3, 4)]
    issue, = check_numbering(docs)
    assert issue.code == 'chapter-numbering'
    assert issue.path == 'ch3.md'
    assert issue.message == 'expected chapter 2, found chapter 3'


def test_duplicate_chapter():
    docs = [parse('# Chapter 1: A\n', 'a.md'),
            parse('# chapter 1: B\n', 'b.md')]
    issue, = check_numbering(docs)
    assert issue.code == 'duplicate-chapter'
    assert 'a.md' in issue.message


def test_missing_chapter_heading():
    docs = [parse('# Introduction\n', 'intro.md'),
            parse('Text\n', 'empty.md'),
            parse('\n\n# Chapter 1: Classes\n', 'ch1.md')]
    issues = check_numbering(docs)
    assert codes(issues) == ['missing-chapter-heading'] * 2
    assert [x.line for x in issues] == [1, 1]


def test_heading_must_have_a_title():
    docs = [parse('# Chapter 1:\n', 'ch1.md')]
    assert codes(check_numbering(docs)) == ['missing-chapter-heading']


def test_report():
    issues = [
        Issue('b.md', 3, 'syntax-error', 'ruby: boom'),
        Issue('a.md', 9, 'missing-language', 'no tag', 'warning'),
        Issue('a.md', 1, 'unknown-language', 'no checker', 'info'),
    ]
    docs = [parse('```\nx\n```\n', 'a.md'), parse('', 'b.md')]
    report = Report(issues, docs)
    assert [x.line for x in report] == [1, 9, 3]
    assert not report.is_ok
    assert len(report.errors) == 1
    assert len(report.warnings) == 1
    assert report.counts() == {'error': 1, 'warning': 1, 'info': 1,
                               'documents': 2, 'blocks': 1}
    assert report.as_text().splitlines() == [
        'a.md:9: warning [missing-language] no tag',
        'b.md:3: error [syntax-error] ruby: boom',
        '1 error(s), 1 warning(s) in 1 code block(s) from 2 document(s)',
    ]
    assert len(report.as_text(show_info=True).splitlines()) == 4

    data = json.loads(json.dumps(report.to_json()))
    assert data['ok'] is False
    assert data['issues'][0]['code'] == 'unknown-language'


def test_empty_report_is_ok():
    report = Report()
    assert report.is_ok
    assert len(report) == 0


def test_numbering_rejects_patterns_without_groups():
    docs = [parse('# Chapter 1: A\n', 'a.md')]
    with pytest.raises(ValueError):
        check_numbering(docs, r'chapter \d+')
    with pytest.raises(ValueError):
        check_numbering(docs, '(')
    with pytest.raises(ValueError):
        check_numbering([parse('no title\n')], r'chapter \d+')
