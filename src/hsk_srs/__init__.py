"""hsk-srs: spaced-repetition scheduling for HSK vocabulary."""

from hsk_srs.consts import VERSION

__version__ = VERSION
