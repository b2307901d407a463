from .__meta__ import __version__, __author__
from .registry_class import registry
from .exceptions import BuildError, MissingInputError, \
    LanguageUnavailableError, DocumentError
from .document import Document, CodeBlock, Heading, parse, parse_file
from .lint import Issue, Report
from .functions import check, check_source, snippets, run, extract
from . import langs as _langs
