import pytest

from bookcheck import functions, registry
from bookcheck.exceptions import BuildError
from bookcheck.execution_manager import ExecutionResult


def source_property(name):
    @property
    def source_property(self):
        return self.get_source(name)
    return source_property


class TestLanguageSupport:
    base_lang = None
    source_all = None
    source_ok = source_property('ok')
    source_syntax = source_property('syntax')
    source_recursive = source_property('recursive')
    source_error = source_property('error')

    @pytest.fixture
    def lang(self):
        return self.base_lang

    @pytest.fixture
    def src_ok(self):
        return self.source_ok

    @pytest.fixture
    def src_syntax(self):
        return self.source_syntax

    @pytest.fixture
    def src_recursive(self):
        return self.source_recursive

    @pytest.fixture
    def src_error(self):
        return self.source_error

    @pytest.fixture
    def manager_cls(self, lang):
        return registry.build_manager_class(lang)

    @pytest.fixture
    def ex_manager_cls(self, lang):
        return registry.execution_manager_class(lang)

    #
    # Auxiliary functions
    #
    @classmethod
    def get_source(cls, name):
        if cls.source_all is None:
            return None

        _, sep, data = cls.source_all.partition('## %s\n' % name)
        if not sep:
            return None
        data, _, _ = data.partition('\n## ')
        return data.strip() + '\n'

    def chapter(self, source):
        return (
            '# Chapter 1: Example\n'
            '\n'
            'Some prose.\n'
            '\n'
            '```%s\n'
            '%s'
            '```\n'
        ) % (self.base_lang, source)

    #
    # Test simple functions.run() interactions
    #
    def test_run_valid_source(self, src_ok, lang, timeout=None):
        result = functions.run(src_ok, lang, ['foo'], timeout=timeout,
                               raises=True)
        assert isinstance(result, ExecutionResult)
        assert result.status == 'ok', result.error_message
        assert result.output.endswith('hello foo!\n')

    def test_run_valid_source_with_timeout(self, src_ok, lang):
        self.test_run_valid_source(src_ok, lang, timeout=5.0)

    def test_run_source_with_runtime_error(self, src_error, lang):
        result = functions.run(src_error, lang)
        assert result.status == 'runtime'
        assert result.error_message

    def test_run_code_with_syntax_error(self, src_syntax, lang):
        result = functions.run(src_syntax, lang)
        assert result.status == 'build'
        assert result.is_error

    def test_run_code_with_syntax_error_raises(self, src_syntax, lang):
        with pytest.raises(BuildError):
            functions.run(src_syntax, lang, raises=True)

    def test_run_recursive_function(self, src_recursive, lang):
        result = functions.run(src_recursive, lang)
        assert result.output == '120\n'

    def test_raises_timeout_error(self, lang):
        src = self.get_source('timeout')
        if src is None:
            return

        result = functions.run(src, lang, timeout=0.5)
        assert result.status == 'timeout'
        assert result.duration < 3

    #
    # Test build managers
    #
    def test_build_manager_has_the_correct_language(self, manager_cls, src_ok,
                                                    lang):
        manager = manager_cls(src_ok)
        assert manager.language == lang

    def test_build_manager_can_build(self, manager_cls, src_ok):
        manager = manager_cls(src_ok)
        assert manager.is_built is False
        manager.build()
        assert manager.is_built is True
        manager.close()

    def test_build_manager_raise_build_error(self, manager_cls, src_syntax):
        manager = manager_cls(src_syntax)
        with pytest.raises(BuildError):
            manager.build()

    def test_build_manager_detect_syntax_error_before_build(
            self, manager_cls, src_syntax, src_ok):
        manager = manager_cls(src_ok)
        manager.syntax_check()  # nothing happens

        manager = manager_cls(src_syntax)
        with pytest.raises(SyntaxError):
            manager.syntax_check()

    def test_execution_manager_cannot_run_twice(self, lang, src_recursive):
        build = registry.build_manager(lang, src_recursive)
        ctrl = registry.execution_manager(lang, build)
        assert ctrl.run().output == '120\n'
        with pytest.raises(RuntimeError):
            ctrl.run()
        build.close()

    #
    # Test snippets embedded in chapters
    #
    def test_valid_snippet_in_chapter(self, src_ok):
        report = functions.check_source(self.chapter(src_ok))
        assert report.is_ok
        assert report.codes() == []

    def test_invalid_snippet_in_chapter(self, src_syntax):
        report = functions.check_source(self.chapter(src_syntax), 'ch01.md')
        assert not report.is_ok
        issue, = report.errors
        assert issue.code == 'syntax-error'
        assert issue.path == 'ch01.md'
        assert 5 <= issue.line <= 6 + len(src_syntax.splitlines())
