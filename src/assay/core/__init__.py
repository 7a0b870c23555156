from assay.core.context import AssertionContext
from assay.core.recorder import Recorder
from assay.core.timings import Timings

__all__ = ["AssertionContext", "Recorder", "Timings"]
