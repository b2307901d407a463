from bookcheck.registry_class import registry


# Python family
registry.register(
    'python',
    'bookcheck.langs.python_family.PythonBuildManager',
    'bookcheck.langs.python_family.PythonExecutionManager',
    extensions=['.py'],
    aliases=['python3', 'py', 'py3']
)
registry.register(
    'python-script',
    'bookcheck.langs.python_family.PythonScriptBuildManager',
    'bookcheck.langs.python_family.PythonScriptExecutionManager',
)
registry.register(
    'pycon',
    'bookcheck.langs.python_family.PythonConsoleBuildManager',
    'bookcheck.langs.python_family.PythonConsoleExecutionManager',
    aliases=['python-console', 'doctest']
)


# Ruby
registry.register(
    'ruby',
    'bookcheck.langs.ruby.RubyBuildManager',
    'bookcheck.langs.ruby.RubyExecutionManager',
    extensions=['.rb'],
    aliases=['rb'],
)
registry.register(
    'irb',
    'bookcheck.langs.ruby.RubyConsoleBuildManager',
    'bookcheck.langs.ruby.RubyConsoleExecutionManager',
    aliases=['ruby-console'],
)
