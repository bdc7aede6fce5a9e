class WordFreqError(Exception):
    """Base class for errors that abort a word-frequency run."""


class InputError(WordFreqError):
    """The input file is missing or cannot be opened."""


class StreamReadError(WordFreqError):
    """Reading the input failed after processing had started."""


class WorkerError(WordFreqError):
    """A counting worker crashed, so its contribution is unknown."""
