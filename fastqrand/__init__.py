from .errors import FatalEntropyUnavailable, InvalidArgument
from .qconfig import GeneratorConfig
from .qreader import HashReader, PrefillReader, new_reader, default_reader
from .qsample import read, bytes_, intn, bigintn
from .qperm import perm, shuffle

reader = default_reader()

__version__ = "1.0.0"
