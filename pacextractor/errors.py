class PacError(Exception):
    """
    Base class for everything that aborts a PAC run.

    `stage` names the reader state the failure happened in, `index` and
    `partition` identify the descriptor involved, when there is one.
    """

    def __init__(self, message, stage=None, index=None, partition=None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.index = index
        self.partition = partition

    def __str__(self):
        context = []
        if self.stage is not None:
            context.append(f'stage={self.stage}')
        if self.index is not None:
            context.append(f'index={self.index}')
        if self.partition:
            context.append(f'partition={self.partition}')
        if not context:
            return self.message
        return f'{self.message} ({", ".join(context)})'


class FormatTooSmall(PacError):
    pass


class TruncatedHeader(PacError):
    pass


class TruncatedDescriptor(PacError):
    pass


class SizeMismatch(PacError):
    pass


class UnsupportedVersion(PacError):
    pass


class UnknownDescriptorFormat(PacError):
    pass


class ChecksumMismatch(PacError):
    def __init__(self, message, expected=None, computed=None, **kwargs):
        super().__init__(message, **kwargs)
        self.expected = expected
        self.computed = computed


class ExtractionIOError(PacError):
    pass


# file name taken from a descriptor is not a plain file name
class UnsafeFileName(ExtractionIOError):
    pass


class PayloadOutOfBounds(ExtractionIOError):
    pass
