import pytest

from bookcheck import registry
from bookcheck.build_manager import BuildManager
from bookcheck.execution_manager import ExecutionManager
from bookcheck.langs.python_family import PythonBuildManager, \
    PythonExecutionManager
from bookcheck.registry_class import LanguageRegistry


def test_registered_languages():
    assert registry.languages() == \
        ['irb', 'pycon', 'python', 'python-script', 'ruby']


@pytest.mark.parametrize('tag, lang', [
    ('python', 'python'),
    ('py', 'python'),
    ('PY3', 'python'),
    ('rb', 'ruby'),
    ('doctest', 'pycon'),
    ('ruby-console', 'irb'),
    ('haskell', None),
    (None, None),
    ('', None),
])
def test_language_from_tag(tag, lang):
    assert registry.language_from_tag(tag) == lang


def test_language_from_filename():
    assert registry.language_from_filename('ch01/example.rb') == 'ruby'
    assert registry.language_from_filename('example.py') == 'python'
    with pytest.raises(ValueError):
        registry.language_from_filename('example.py3')
    with pytest.raises(ValueError):
        registry.language_from_filename('chapter.md')


def test_manager_classes_are_loaded_from_strings():
    assert registry.build_manager_class('py') is PythonBuildManager
    assert registry.execution_manager_class('python') is \
        PythonExecutionManager


def test_build_manager_uses_canonical_name():
    manager = registry.build_manager('py3', 'x = 1', line=5)
    assert manager.language == 'python'
    assert manager.line_offset == 4
    ctrl = registry.execution_manager('py3', manager)
    assert ctrl.language == 'python'
    assert ctrl.source == 'x = 1'


def test_custom_registry():
    class NoopBuildManager(BuildManager):
        def syntax_check(self):
            pass

    reg = LanguageRegistry()
    reg.register('noop', NoopBuildManager, ExecutionManager,
                 extensions=['.noop'], aliases=['nop'])
    assert reg.language_from_tag('nop') == 'noop'
    assert reg.language_from_extension('noop') == 'noop'
    assert reg.extension_for('noop') == '.noop'
    assert reg.build_manager('nop', '').language == 'noop'


def test_extension_conflict():
    reg = LanguageRegistry()
    reg.register('a', BuildManager, ExecutionManager, extensions=['.x'])
    with pytest.raises(RuntimeError):
        reg.register('b', BuildManager, ExecutionManager, extensions=['.x'])
    reg.register('b', BuildManager, ExecutionManager, extensions=['.x'],
                 force=True)
    assert reg.language_from_extension('.x') == 'b'


def test_execution_manager_requires_build_manager():
    with pytest.raises(AssertionError):
        registry.execution_manager('python', 'x = 1')


def test_interpreted_languages_run_the_source_file():
    build = registry.build_manager('python-script', 'print(1)\n')
    ctrl = registry.execution_manager('python-script', build)
    assert ctrl.get_shell_args()[1:] == ['main.py']
