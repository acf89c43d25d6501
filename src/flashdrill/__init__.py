"""flashdrill: spaced-repetition drills for flashcard catalogs."""

from flashdrill.consts import VERSION

__version__ = VERSION
