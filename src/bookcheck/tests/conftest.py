import shutil

import pytest


def pytest_configure(config):
    config.addinivalue_line('markers', 'python: tests for python snippets')
    config.addinivalue_line('markers', 'ruby: tests that need a ruby '
                                       'interpreter')


def pytest_collection_modifyitems(config, items):
    if shutil.which('ruby'):
        return
    skip_ruby = pytest.mark.skip(reason='ruby executable not found')
    for item in items:
        if 'ruby' in item.keywords:
            item.add_marker(skip_ruby)
