"""
Shared fixtures.
"""

import io
import textwrap

import pytest

from tagsmith.compiler.expressions import ExpressionPool
from tagsmith.compiler.options import CompilerOptions
from tagsmith.compiler.preprocessors import PreprocessorRegistry
from tagsmith.utils.logger import LogLevel, configure_logging


@pytest.fixture
def options():
    return CompilerOptions()


@pytest.fixture
def pool():
    return ExpressionPool()


@pytest.fixture
def registry():
    return PreprocessorRegistry()


@pytest.fixture
def log_stream():
    """Capture tagsmith log output at debug level."""
    stream = io.StringIO()
    configure_logging(LogLevel.DEBUG, stream=stream)
    yield stream
    configure_logging(LogLevel.WARNING)


@pytest.fixture
def source():
    """Dedent a source snippet written inline in a test."""
    def make(text: str) -> str:
        return textwrap.dedent(text).lstrip("\n")
    return make
