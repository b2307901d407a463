import importlib
import os

from bookcheck.build_manager import BuildManager


class LanguageRegistry:
    """
    Registry that maps languages and fence tags to managers.
    """

    def __init__(self):
        self._extensions = {}
        self._aliases = {}
        self._execution_managers = {}
        self._build_managers = {}

    def _register_extension(self, ext, language, force=False):
        """
        Register extension to the given language.
        """

        if ext.startswith('.'):
            ext = ext[1:]

        extensions = self._extensions
        if not force and extensions.get(ext, language) != language:
            raise RuntimeError(
                'extension .%s is already registered to %r' %
                (ext, extensions[ext])
            )
        extensions[ext] = language

    def register(self, language, build, execution,
                 force=False,
                 extensions=(),
                 aliases=()):
        """
        Register execution/build manager classes for language.

        Managers can be given as classes or as dotted strings such as
        "bookcheck.langs.ruby.RubyBuildManager". Strings are imported on first
        use.
        """

        for ext in extensions:
            self._register_extension(ext, language, force=force)

        self._execution_managers[language] = execution
        self._build_managers[language] = build
        self._aliases[language] = language
        for alias in aliases:
            self._aliases[alias] = language

    def _canonical(self, language):
        try:
            return self._aliases[language]
        except KeyError:
            raise ValueError('unsupported language: %r' % language)

    def _load(self, managers, language):
        language = self._canonical(language)
        manager_class = managers[language]
        if isinstance(manager_class, str):
            mod_name, _, manager_name = manager_class.rpartition('.')
            mod = importlib.import_module(mod_name)
            manager_class = getattr(mod, manager_name)
            managers[language] = manager_class
        return manager_class

    def build_manager_class(self, language):
        """
        Return the BuildManager subclass associated with the given language.
        """

        return self._load(self._build_managers, language)

    def build_manager(self, language, source, **kwargs):
        """
        Return a build manager instance for the given language string.

        It passes the source code instance and any other additional arguments
        passed to this function to the class constructor.
        """

        manager_class = self.build_manager_class(language)
        manager = manager_class(source, **kwargs)
        manager.language = self._canonical(language)
        return manager

    def execution_manager(self, language, build_manager, inputs=(),
                          **kwargs):
        """
        Return an execution manager instance for the given language string.

        It passes the build_manager instance and any other additional arguments
        passed to this function to the class constructor.
        """

        assert isinstance(build_manager, BuildManager), build_manager
        manager_class = self.execution_manager_class(language)
        manager = manager_class(build_manager, inputs, **kwargs)
        manager.language = self._canonical(language)
        return manager

    def execution_manager_class(self, language):
        """
        Return the execution manager class associated with the given language.
        """

        return self._load(self._execution_managers, language)

    def languages(self):
        """
        Return a sorted list with the canonical names of all languages.
        """

        return sorted(self._build_managers)

    def language_from_tag(self, tag):
        """
        Return the canonical language for a fence tag or None if the tag is
        not supported.
        """

        if not tag:
            return None
        return self._aliases.get(tag.lower())

    def extension_for(self, language):
        """
        Return the first extension registered to language (e.g. ".rb") or
        None.
        """

        language = self._canonical(language)
        for ext, lang in self._extensions.items():
            if lang == language:
                return '.' + ext
        return None

    def language_from_extension(self, ext):
        """
        Return a language string from the given extension.
        """

        if ext.startswith('.'):
            ext = ext[1:]
        try:
            return self._extensions[ext]
        except KeyError:
            raise ValueError('unknown extension: %r' % ext)

    def language_from_filename(self, path):
        """
        Return the language string from a given filename.
        """

        ext = os.path.splitext(path)[1] or '.'
        return self.language_from_extension(ext)

    def language_from_source(self, file, path=None):
        """
        Return the language from either an explicit path or from a file object
        .name attribute.
        """

        name = getattr(file, 'name', path)
        if name is None:
            raise ValueError('cannot determine language: no file name given')
        return self.language_from_filename(name)

    def build_manager_from_path(self, lang, source, path, **kwargs):
        """
        Uses path information to load the most appropriate BuildManager.

        It accepts either a source string or a source file object.
        """

        if lang is None:
            lang = self.language_from_source(source, path)

        if not isinstance(source, str):
            source = source.read()

        return self.build_manager(lang, source, path=path, **kwargs)


registry = LanguageRegistry()
